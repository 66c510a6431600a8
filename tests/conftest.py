"""
Shared test fixtures.

The catalog store double mirrors the DatabaseManager methods the import
services call, including ON CONFLICT semantics of the product upsert.
"""

import copy
import pytest

from models.catalog import PRODUCT_UPDATE_COLUMNS, generate_id

# ===================
# IN-MEMORY CATALOG STORE
# ===================

class InMemoryCatalogStore:
    """Stand-in for models.database.DatabaseManager."""

    def __init__(self):
        self.vendors = {}
        self.manufacturers = {}
        self.products = {}
        self.calls = {"get_or_create_vendor": 0, "get_or_create_manufacturer": 0,
                      "find_products": 0, "upsert_products": 0}
        self.fail_upsert_calls = set()
        self.fail_vendor_lookups = False

    def get_or_create_vendor(self, name, site_source):
        self.calls["get_or_create_vendor"] += 1
        if self.fail_vendor_lookups:
            raise ConnectionError("vendor store unavailable")
        if name in self.vendors:
            return self.vendors[name]["vendor_id"], False
        vendor_id = generate_id()
        self.vendors[name] = {"vendor_id": vendor_id, "site_source": site_source, "name": name}
        return vendor_id, True

    def get_or_create_manufacturer(self, manufacturer_id, name):
        self.calls["get_or_create_manufacturer"] += 1
        if manufacturer_id in self.manufacturers:
            return manufacturer_id, False
        self.manufacturers[manufacturer_id] = {"manufacturer_id": manufacturer_id, "name": name}
        return manufacturer_id, True

    def find_products(self, product_ids):
        self.calls["find_products"] += 1
        return {
            product_id: copy.deepcopy(self.products[product_id])
            for product_id in product_ids
            if product_id in self.products
        }

    def upsert_products(self, instructions):
        self.calls["upsert_products"] += 1
        if self.calls["upsert_products"] in self.fail_upsert_calls:
            raise RuntimeError("bulk write rejected")
        for instruction in instructions:
            values = copy.deepcopy(instruction.insert_values())
            existing = self.products.get(instruction.product_id)
            if existing is None:
                self.products[instruction.product_id] = values
            else:
                for column in PRODUCT_UPDATE_COLUMNS:
                    existing[column] = values[column]
        return len(instructions)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def store() -> InMemoryCatalogStore:
    """Empty in-memory catalog store."""
    return InMemoryCatalogStore()


@pytest.fixture
def gauze_row_data() -> dict:
    """A single feed row keyed by column header."""
    return {
        "SiteSource": "AcmeMed",
        "ItemID": "I1",
        "ManufacturerID": "M1",
        "ManufacturerName": "Acme",
        "ProductID": "P1",
        "ProductName": "Gauze",
        "ManufacturerItemCode": "C1",
        "ItemDescription": "Sterile 4x4",
        "PKG": "Box10",
        "UnitPrice": "5.50",
        "QuantityOnHand": "3",
        "Availability": "available",
    }
