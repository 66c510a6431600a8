# models/database.py
import time
import logging
import psycopg2
import psycopg2.extras
import sshtunnel
from contextlib import contextmanager
from psycopg2.pool import ThreadedConnectionPool

from config.settings import get_db_config
from exceptions import ConfigurationError
from models.catalog import PRODUCT_INSERT_COLUMNS, PRODUCT_UPDATE_COLUMNS, generate_id

# Configure SSH tunnel timeout
sshtunnel.SSH_TIMEOUT = 30.0
sshtunnel.TUNNEL_TIMEOUT = 30.0

logger = logging.getLogger(__name__)

JSON_COLUMNS = {'images', 'variants', 'options', 'data_public', 'info'}

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS vendors (
        vendor_id TEXT PRIMARY KEY,
        site_source TEXT NOT NULL,
        name TEXT NOT NULL UNIQUE,
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS manufacturers (
        manufacturer_id TEXT PRIMARY KEY,
        name TEXT,
        email TEXT,
        phone TEXT,
        address TEXT,
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS products (
        product_id TEXT PRIMARY KEY,
        doc_id TEXT,
        name TEXT,
        description TEXT NOT NULL DEFAULT '',
        vendor_id TEXT REFERENCES vendors (vendor_id),
        manufacturer_id TEXT REFERENCES manufacturers (manufacturer_id),
        availability TEXT,
        images JSONB NOT NULL DEFAULT '[]',
        variants JSONB NOT NULL DEFAULT '[]',
        options JSONB NOT NULL DEFAULT '[]',
        storefront_price_visibility TEXT,
        is_fragile BOOLEAN,
        published TEXT,
        is_taxable BOOLEAN,
        category_id TEXT,
        data_public JSONB NOT NULL DEFAULT '{}',
        immutable BOOLEAN,
        deployment_id TEXT,
        doc_type TEXT,
        namespace TEXT,
        company_id TEXT,
        status TEXT,
        info JSONB NOT NULL DEFAULT '{}',
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE UNIQUE INDEX IF NOT EXISTS products_doc_id_key ON products (doc_id);
"""

class DatabaseManager:
    """Manages database connections and catalog store operations"""

    def __init__(self, db_config=None, pool=None):
        self.db_config = db_config if db_config is not None else get_db_config()
        self.pool = pool
        self.tunnel = None
        if self.pool is None:
            self._setup_connection()

    def _setup_connection(self):
        """Set up the optional SSH tunnel and the connection pool"""
        for setting in ('db_name', 'db_user'):
            if not self.db_config.get(setting):
                raise ConfigurationError(setting, f"Database setting '{setting}' is not configured")

        host = self.db_config['db_host']
        port = self.db_config['db_port']
        try:
            if self.db_config.get('ssh_host'):
                self.tunnel = sshtunnel.SSHTunnelForwarder(
                    (self.db_config['ssh_host']),
                    ssh_username=self.db_config['ssh_username'],
                    ssh_password=self.db_config['ssh_password'],
                    remote_bind_address=(
                        self.db_config['postgres_hostname'],
                        self.db_config['postgres_port']
                    )
                )
                self.tunnel.start()
                logger.info("SSH tunnel established")
                host = '127.0.0.1'
                port = self.tunnel.local_bind_port

            self.pool = ThreadedConnectionPool(
                minconn=1,
                maxconn=self.db_config.get('pool_max', 10),
                user=self.db_config['db_user'],
                password=self.db_config['db_password'],
                host=host,
                port=port,
                database=self.db_config['db_name']
            )
            logger.info("Database connection pool created")

        except Exception as e:
            logger.error(f"Failed to set up database connection: {str(e)}")
            if self.tunnel and self.tunnel.is_active:
                self.tunnel.close()
            raise

    def close(self):
        """Close all connections and tunnel"""
        if self.pool:
            self.pool.closeall()
            logger.info("Closed all database connections")

        if self.tunnel and self.tunnel.is_active:
            self.tunnel.close()
            logger.info("Closed SSH tunnel")

    def _acquire(self, retries, retry_delay):
        for attempt in range(retries):
            try:
                return self.pool.getconn()
            except psycopg2.OperationalError as e:
                logger.warning(f"Database connection error (attempt {attempt+1}/{retries}): {str(e)}")
                if attempt == retries - 1:
                    logger.error("Max retries reached. Unable to get database connection.")
                    raise
                time.sleep(retry_delay)

    @contextmanager
    def get_connection(self, retries=3, retry_delay=2):
        """Get a connection from the pool with retry logic"""
        conn = self._acquire(retries, retry_delay)
        broken = False
        try:
            yield conn
        except (psycopg2.OperationalError, psycopg2.InterfaceError):
            broken = True
            raise
        finally:
            self.pool.putconn(conn, close=broken)

    @contextmanager
    def get_cursor(self, commit=True):
        """Get a database cursor with automatic commit/rollback"""
        with self.get_connection() as conn:
            cursor = conn.cursor(cursor_factory=psycopg2.extras.DictCursor)
            try:
                yield cursor
                if commit:
                    conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Database operation failed: {str(e)}")
                raise
            finally:
                cursor.close()

    def ensure_schema(self):
        """Create catalog tables and unique keys if they do not exist"""
        with self.get_cursor() as cursor:
            cursor.execute(SCHEMA_SQL)
        logger.info("Catalog schema verified")

    def get_or_create_vendor(self, name, site_source):
        """
        Get vendor_id by name or create a new vendor

        Returns:
            tuple: (vendor_id, created)
        """
        with self.get_cursor() as cursor:
            cursor.execute("SELECT vendor_id FROM vendors WHERE name = %s", (name,))
            result = cursor.fetchone()
            if result:
                return result[0], False

            # A concurrent run may insert the same name between the two statements
            cursor.execute(
                """
                INSERT INTO vendors (vendor_id, site_source, name)
                VALUES (%s, %s, %s)
                ON CONFLICT (name) DO NOTHING
                RETURNING vendor_id
                """,
                (generate_id(), site_source, name)
            )
            result = cursor.fetchone()
            if result:
                return result[0], True

            cursor.execute("SELECT vendor_id FROM vendors WHERE name = %s", (name,))
            return cursor.fetchone()[0], False

    def get_or_create_manufacturer(self, manufacturer_id, name):
        """
        Get or create a manufacturer; an existing name is never overwritten

        Returns:
            tuple: (manufacturer_id, created)
        """
        with self.get_cursor() as cursor:
            cursor.execute(
                "SELECT manufacturer_id FROM manufacturers WHERE manufacturer_id = %s",
                (manufacturer_id,)
            )
            result = cursor.fetchone()
            if result:
                return result[0], False

            cursor.execute(
                """
                INSERT INTO manufacturers (manufacturer_id, name)
                VALUES (%s, %s)
                ON CONFLICT (manufacturer_id) DO NOTHING
                RETURNING manufacturer_id
                """,
                (manufacturer_id, name)
            )
            return manufacturer_id, cursor.fetchone() is not None

    def find_products(self, product_ids):
        """
        Fetch existing products for a set of product ids in one query

        Returns:
            dict: product_id -> product record
        """
        product_ids = list(product_ids)
        if not product_ids:
            return {}

        with self.get_cursor(commit=False) as cursor:
            cursor.execute(
                "SELECT * FROM products WHERE product_id = ANY(%s)",
                (product_ids,)
            )
            return {row['product_id']: dict(row) for row in cursor.fetchall()}

    def upsert_products(self, instructions):
        """
        Apply product upserts as one batch in a single transaction

        Returns:
            int: Number of instructions applied
        """
        if not instructions:
            return 0

        columns = ('product_id',) + PRODUCT_INSERT_COLUMNS + PRODUCT_UPDATE_COLUMNS
        updates = ',\n'.join(f"{column} = EXCLUDED.{column}" for column in PRODUCT_UPDATE_COLUMNS)
        query = f"""
            INSERT INTO products ({', '.join(columns)})
            VALUES ({', '.join(f'%({column})s' for column in columns)})
            ON CONFLICT (product_id) DO UPDATE SET
                {updates},
                updated_at = CURRENT_TIMESTAMP
        """
        params_list = [self._product_params(instruction, columns) for instruction in instructions]

        with self.get_cursor() as cursor:
            psycopg2.extras.execute_batch(cursor, query, params_list)
        return len(params_list)

    @staticmethod
    def _product_params(instruction, columns):
        values = instruction.insert_values()
        params = {}
        for column in columns:
            value = values.get(column)
            params[column] = psycopg2.extras.Json(value) if column in JSON_COLUMNS else value
        return params
