# services/merge.py
import logging
from config.settings import DEFAULT_AVAILABILITY, get_product_defaults
from models.catalog import (
    PRODUCT_INSERT_COLUMNS,
    ProductGroup,
    UpsertInstruction,
    generate_id,
)
from services.variants import build_variant, generate_options, parse_images

logger = logging.getLogger(__name__)

def is_variant_updated(existing_variant, updated_variant):
    """A stored variant is replaced only when price, availability or description changed"""
    return (
        existing_variant.get('price') != updated_variant.get('price')
        or existing_variant.get('available') != updated_variant.get('available')
        or existing_variant.get('description') != updated_variant.get('description')
    )

def merge_variants(existing_variants, incoming_variants):
    """
    Merge incoming variants into a stored variant list by sku

    Stored variants keep their position; unchanged ones are kept verbatim so
    ids generated on earlier runs survive. New skus are appended in feed order.

    Args:
        existing_variants (list): Stored variant documents
        incoming_variants (list): Variant documents built from the current chunk

    Returns:
        list: Merged variant documents, unique by sku
    """
    merged = {}
    for variant in existing_variants or []:
        merged[variant.get('sku')] = variant

    for variant in incoming_variants:
        sku = variant['sku']
        current = merged.get(sku)
        if current is None or is_variant_updated(current, variant):
            merged[sku] = variant

    return list(merged.values())

class ChunkMerger:
    """Turns one chunk of feed rows into product upsert instructions"""

    def __init__(self, db_manager, resolver, enhancer, product_defaults=None, sku_separator=''):
        self.db = db_manager
        self.resolver = resolver
        self.enhancer = enhancer
        self.product_defaults = product_defaults if product_defaults is not None else get_product_defaults()
        self.sku_separator = sku_separator

    def group_rows(self, chunk):
        """
        Group rows by product id in first-seen order

        Returns:
            tuple: ({product_id: ProductGroup}, skipped row count)
        """
        groups = {}
        skipped = 0
        for row in chunk:
            if not row.product_id or not row.item_id:
                logger.warning("Missing ProductID or ItemID in row, skipping.")
                skipped += 1
                continue

            group = groups.get(row.product_id)
            if group is None:
                group = groups[row.product_id] = ProductGroup(row=row)
            group.variants.append(build_variant(row, self.sku_separator).to_document())

        return groups, skipped

    def build_instructions(self, chunk):
        """
        Reconcile a chunk against the stored catalog

        Args:
            chunk (list): Rows of the chunk in file order

        Returns:
            tuple: (list of UpsertInstruction, skipped row count)
        """
        groups, skipped = self.group_rows(chunk)
        if not groups:
            return [], skipped

        existing_products = self.db.find_products(groups.keys())
        logger.debug(f"Found {len(existing_products)}/{len(groups)} existing products in chunk")

        instructions = []
        for product_id, group in groups.items():
            existing = existing_products.get(product_id)
            if existing is not None:
                instruction = self._update_existing(product_id, group, existing)
            else:
                instruction = self._create_new(product_id, group)
            instructions.append(instruction)

        return instructions, skipped

    def _owned_fields(self, group):
        row = group.row
        return {
            'name': row.product_name,
            'description': row.product_description or '',
            'vendor_id': self.resolver.resolve_vendor(row.site_source),
            'manufacturer_id': self.resolver.resolve_manufacturer(row.manufacturer_id, row.manufacturer_name),
            'availability': row.availability or DEFAULT_AVAILABILITY,
            'images': parse_images(row),
        }

    def _update_existing(self, product_id, group, existing):
        set_fields = self._owned_fields(group)
        set_fields['variants'] = merge_variants(existing.get('variants'), group.variants)

        set_on_insert = {column: existing.get(column) for column in PRODUCT_INSERT_COLUMNS}
        if not set_on_insert['doc_id']:
            # Only lands if the row has to be re-inserted; the update path never writes doc_id
            logger.error(f"Product with ProductID {product_id} has null docId")
            set_on_insert['doc_id'] = generate_id()

        return UpsertInstruction(product_id=product_id, set_fields=set_fields, set_on_insert=set_on_insert)

    def _create_new(self, product_id, group):
        row = group.row
        set_fields = self._owned_fields(group)
        set_fields['variants'] = merge_variants([], group.variants)

        if not set_fields['description'].strip():
            set_fields['description'] = self.enhancer.enhance(set_fields['name'], set_fields['description'])

        set_on_insert = {
            **self.product_defaults,
            'doc_id': generate_id(),
            'options': generate_options(row),
            'data_public': dict(self.product_defaults.get('data_public') or {}),
            'info': {
                'transactionId': generate_id(),
                'skipEvent': False,
                'userRequestId': generate_id(),
            },
        }
        return UpsertInstruction(product_id=product_id, set_fields=set_fields, set_on_insert=set_on_insert)
