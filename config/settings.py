# config/settings.py
import os
from pathlib import Path
from dotenv import load_dotenv

def load_env():
    """Load environment variables from .env file"""
    env_path = Path(__file__).parent.parent / '.env'
    load_dotenv(dotenv_path=env_path)

# Database connection settings
def get_db_config():
    """Get database connection configuration from environment variables"""
    return {
        'ssh_host': os.getenv('SSH_HOST'),
        'ssh_username': os.getenv('SSH_USERNAME'),
        'ssh_password': os.getenv('SSH_PASSWORD'),
        'postgres_hostname': os.getenv('POSTGRES_HOSTNAME'),
        'postgres_port': int(os.getenv('POSTGRES_PORT', 5432)),
        'db_host': os.getenv('DB_HOST', '127.0.0.1'),
        'db_port': int(os.getenv('DB_PORT', 5432)),
        'db_name': os.getenv('DB_NAME'),
        'db_user': os.getenv('DB_USER'),
        'db_password': os.getenv('DB_PASSWORD'),
        'pool_max': int(os.getenv('DB_POOL_MAX', 10)),
    }

def get_enhancer_config():
    """
    Get description enhancement settings.

    A missing API key only disables enhancement; it is never an error.
    """
    return {
        'enabled': os.getenv('ENHANCE_DESCRIPTIONS', 'false').lower() in ('1', 'true', 'yes'),
        'api_key': os.getenv('OPENAI_API_KEY') or None,
        'model': os.getenv('OPENAI_MODEL', 'gpt-3.5-turbo'),
        'max_tokens': int(os.getenv('OPENAI_MAX_TOKENS', 150)),
        'temperature': float(os.getenv('OPENAI_TEMPERATURE', 0.7)),
    }

def get_import_config():
    """Get import run settings from environment variables"""
    return {
        'source_file': os.getenv('IMPORT_SOURCE_FILE', './data/raw.txt'),
        'chunk_size': int(os.getenv('IMPORT_CHUNK_SIZE', CHUNK_SIZE)),
        'sku_separator': os.getenv('SKU_SEPARATOR', ''),
    }

def get_product_defaults():
    """Metadata written once when a product is first created"""
    return {
        'storefront_price_visibility': 'members-only',
        'is_fragile': False,
        'published': 'published',
        'is_taxable': True,
        'category_id': os.getenv('CATALOG_CATEGORY_ID', 'U8YOybu1vbgQdbhSkrpmAYIV'),
        'data_public': {},
        'immutable': False,
        'deployment_id': os.getenv('CATALOG_DEPLOYMENT_ID', 'd8039'),
        'doc_type': 'item',
        'namespace': 'items',
        'company_id': os.getenv('CATALOG_COMPANY_ID', '2yTnVUyG6H9yRX3K1qIFIiRz'),
        'status': 'active',
    }

# File processing settings
FILE_DELIMITER = '\t'
ENCODING = 'utf-8'
MAX_FIELD_SIZE = 2**31 - 1  # Long product descriptions exceed the csv default of 131072
CHUNK_SIZE = 1000  # Number of rows reconciled and written per batch

DEFAULT_AVAILABILITY = 'available'
CURRENCY = 'EUR'

# Column order of the supplier feed; the file's own header line is ignored
COLUMNS = [
    'SiteSource', 'ItemID', 'ManufacturerID', 'ManufacturerCode', 'ManufacturerName',
    'ProductID', 'ProductName', 'ProductDescription', 'ManufacturerItemCode', 'ItemDescription',
    'ImageFileName', 'ItemImageURL', 'NDCItemCode', 'PKG', 'UnitPrice',
    'QuantityOnHand', 'PriceDescription', 'Availability', 'PrimaryCategoryID', 'PrimaryCategoryName',
    'SecondaryCategoryID', 'SecondaryCategoryName', 'CategoryID', 'CategoryName', 'IsRX',
    'IsTBD'
]
