# models/catalog.py
"""
Record types shared by the import services.

Product documents keep the camelCase keys of the catalog schema because the
variant, option and image payloads are stored verbatim as JSONB and read by
other catalog consumers.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Optional
from uuid import uuid4

from config.settings import COLUMNS

# Product fields the import owns; written on every upsert
PRODUCT_UPDATE_COLUMNS = (
    'name', 'description', 'vendor_id', 'manufacturer_id',
    'availability', 'images', 'variants',
)

# Written only when the product is first inserted
PRODUCT_INSERT_COLUMNS = (
    'doc_id', 'options', 'storefront_price_visibility', 'is_fragile', 'published',
    'is_taxable', 'category_id', 'data_public', 'immutable', 'deployment_id',
    'doc_type', 'namespace', 'company_id', 'status', 'info',
)


def generate_id() -> str:
    """Opaque identifier for documents, variants and options"""
    return uuid4().hex


@dataclass(frozen=True)
class Row:
    """One line of the supplier feed, fields in file order"""
    site_source: str = ''
    item_id: str = ''
    manufacturer_id: str = ''
    manufacturer_code: str = ''
    manufacturer_name: str = ''
    product_id: str = ''
    product_name: str = ''
    product_description: str = ''
    manufacturer_item_code: str = ''
    item_description: str = ''
    image_file_name: str = ''
    item_image_url: str = ''
    ndc_item_code: str = ''
    pkg: str = ''
    unit_price: str = ''
    quantity_on_hand: str = ''
    price_description: str = ''
    availability: str = ''
    primary_category_id: str = ''
    primary_category_name: str = ''
    secondary_category_id: str = ''
    secondary_category_name: str = ''
    category_id: str = ''
    category_name: str = ''
    is_rx: str = ''
    is_tbd: str = ''

    @classmethod
    def from_values(cls, values):
        """
        Build a row from split column values

        Short lines are padded with empty strings and surplus columns dropped.
        """
        names = [f.name for f in fields(cls)]
        padded = list(values) + [''] * (len(names) - len(values))
        return cls(**{name: (value or '').strip() for name, value in zip(names, padded)})

    @classmethod
    def from_mapping(cls, mapping):
        """Build a row from a {column header: value} mapping"""
        return cls.from_values([mapping.get(header, '') for header in COLUMNS])


@dataclass
class Variant:
    id: str
    sku: str
    available: bool
    price: float
    cost: float
    currency: str
    description: str
    packaging: str
    manufacturer_item_code: str
    manufacturer_item_id: str
    option_name: str
    options_path: str
    option_items_path: str
    item_code: str
    images: list[dict[str, Any]] = field(default_factory=list)
    active: bool = True

    def to_document(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'available': self.available,
            'attributes': {
                'packaging': self.packaging,
                'description': self.description,
            },
            'cost': self.cost,
            'currency': self.currency,
            'description': self.description,
            'manufacturerItemCode': self.manufacturer_item_code,
            'manufacturerItemId': self.manufacturer_item_id,
            'packaging': self.packaging,
            'price': self.price,
            'optionName': self.option_name,
            'optionsPath': self.options_path,
            'optionItemsPath': self.option_items_path,
            'sku': self.sku,
            'active': self.active,
            'images': self.images,
            'itemCode': self.item_code,
        }


@dataclass
class ProductGroup:
    """Rows of one productID within a chunk; the first row seen represents the product"""
    row: Row
    variants: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class UpsertInstruction:
    """
    Match-or-insert of one product keyed by product_id.

    ``set_fields`` are written on both paths, ``set_on_insert`` only when no
    product with that id exists yet.
    """
    product_id: str
    set_fields: dict[str, Any]
    set_on_insert: dict[str, Any]

    def insert_values(self) -> dict[str, Any]:
        return {'product_id': self.product_id, **self.set_on_insert, **self.set_fields}


@dataclass
class ChunkResult:
    index: int
    row_count: int
    skipped_rows: int = 0
    product_count: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    chunks: list[ChunkResult] = field(default_factory=list)
    vendors_created: int = 0
    manufacturers_created: int = 0
    cancelled: bool = False

    @property
    def rows_read(self) -> int:
        return sum(chunk.row_count for chunk in self.chunks)

    @property
    def rows_skipped(self) -> int:
        return sum(chunk.skipped_rows for chunk in self.chunks)

    @property
    def products_written(self) -> int:
        return sum(chunk.product_count for chunk in self.chunks if chunk.succeeded)

    @property
    def failed_chunks(self) -> list[ChunkResult]:
        return [chunk for chunk in self.chunks if not chunk.succeeded]

    def as_dict(self) -> dict[str, Any]:
        return {
            'chunks': len(self.chunks),
            'rows_read': self.rows_read,
            'rows_skipped': self.rows_skipped,
            'products_written': self.products_written,
            'failed_chunks': [asdict(chunk) for chunk in self.failed_chunks],
            'vendors_created': self.vendors_created,
            'manufacturers_created': self.manufacturers_created,
            'cancelled': self.cancelled,
        }
