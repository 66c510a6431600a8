# services/variants.py
import re
from config.settings import CURRENCY
from models.catalog import Variant, generate_id

# Feed values are parsed permissively: "5.50 EUR" is 5.5, "3 units" is 3
_LEADING_FLOAT = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')

def parse_number(value):
    """
    Parse a price-like value

    Args:
        value (str): Raw column value

    Returns:
        float: Parsed number, 0.0 when unparsable
    """
    match = _LEADING_FLOAT.match(value or '')
    if not match:
        return 0.0
    return float(match.group(1))

def parse_quantity(value):
    """Leading integer of a quantity column, or None"""
    match = _LEADING_INT.match(value or '')
    return int(match.group(1)) if match else None

def is_available(quantity_on_hand):
    quantity = parse_quantity(quantity_on_hand)
    return quantity is not None and quantity > 0

def build_sku(row, separator=''):
    """Stable variant identity: item id, manufacturer item code and packaging"""
    return separator.join([row.item_id, row.manufacturer_item_code, row.pkg])

def parse_images(row):
    """A row always carries exactly one image entry"""
    return [
        {
            'fileName': row.image_file_name or '',
            'cdnLink': row.item_image_url or None,
            'i': 0,
            'alt': row.item_description or None,
        }
    ]

def generate_options(row):
    """Selectable packaging and description options for a new product"""
    return [
        _option('packaging', row.pkg),
        _option('description', row.item_description),
    ]

def _option(name, value):
    return {
        'id': generate_id(),
        'name': name,
        'dataField': None,
        'values': [
            {
                'id': generate_id(),
                'name': value,
                'value': value,
            }
        ],
    }

def build_variant(row, sku_separator=''):
    """
    Derive a variant from one feed row

    Args:
        row (Row): Parsed feed row
        sku_separator (str): Joins the sku components, empty for stored-data compatibility

    Returns:
        Variant: The variant for this row
    """
    price = parse_number(row.unit_price)
    description = row.item_description
    packaging = row.pkg

    return Variant(
        id=generate_id(),
        sku=build_sku(row, sku_separator),
        available=is_available(row.quantity_on_hand),
        price=price,
        cost=price,
        currency=CURRENCY,
        description=description,
        packaging=packaging,
        manufacturer_item_code=row.manufacturer_item_code,
        manufacturer_item_id=row.item_id,
        option_name=f"{packaging}, {description}",
        options_path=generate_id(),
        option_items_path=generate_id(),
        item_code=row.ndc_item_code,
        images=parse_images(row),
    )
