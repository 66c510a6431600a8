"""
Unit tests for the PostgreSQL catalog store, with a mocked connection pool.
"""

from unittest.mock import MagicMock, patch

import psycopg2
import psycopg2.extras
import pytest

from exceptions import ConfigurationError
from models.catalog import PRODUCT_INSERT_COLUMNS, PRODUCT_UPDATE_COLUMNS, UpsertInstruction
from models.database import DatabaseManager


@pytest.fixture
def pool():
    pool = MagicMock()
    connection = pool.getconn.return_value
    connection.cursor.return_value = MagicMock()
    return pool


@pytest.fixture
def cursor(pool):
    return pool.getconn.return_value.cursor.return_value


@pytest.fixture
def db(pool):
    return DatabaseManager(db_config={}, pool=pool)


def full_instruction(product_id="P1"):
    return UpsertInstruction(
        product_id=product_id,
        set_fields={column: f"{column}-value" for column in PRODUCT_UPDATE_COLUMNS},
        set_on_insert={column: f"{column}-value" for column in PRODUCT_INSERT_COLUMNS},
    )


class TestConnectionHandling:

    def test_commits_and_returns_connection(self, db, pool, cursor):
        cursor.fetchone.return_value = ("v-1",)
        db.get_or_create_vendor("AcmeMed", "AcmeMed")

        connection = pool.getconn.return_value
        connection.commit.assert_called_once()
        cursor.close.assert_called_once()
        pool.putconn.assert_called_once_with(connection, close=False)

    def test_rolls_back_on_error(self, db, pool, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")

        with pytest.raises(psycopg2.OperationalError):
            db.get_or_create_vendor("AcmeMed", "AcmeMed")

        connection = pool.getconn.return_value
        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()
        pool.putconn.assert_called_once_with(connection, close=True)

    def test_retries_pool_checkout(self, db, pool):
        connection = MagicMock()
        pool.getconn.side_effect = [psycopg2.OperationalError("busy"), connection]

        with patch("models.database.time.sleep") as sleep:
            with db.get_connection(retries=3, retry_delay=0) as conn:
                assert conn is connection

        sleep.assert_called_once_with(0)

    def test_missing_database_name(self):
        with pytest.raises(ConfigurationError) as exc_info:
            DatabaseManager(db_config={"db_name": None, "db_user": "catalog"})
        assert exc_info.value.details == {"setting": "db_name"}


class TestVendors:

    def test_existing_vendor(self, db, cursor):
        cursor.fetchone.return_value = ("v-0",)
        assert db.get_or_create_vendor("AcmeMed", "AcmeMed") == ("v-0", False)
        assert cursor.execute.call_count == 1

    def test_creates_vendor(self, db, cursor):
        cursor.fetchone.side_effect = [None, ("v-1",)]
        assert db.get_or_create_vendor("AcmeMed", "AcmeMed") == ("v-1", True)
        insert_sql = cursor.execute.call_args_list[1].args[0]
        assert "ON CONFLICT (name) DO NOTHING" in insert_sql

    def test_lost_race_fetches_winner(self, db, cursor):
        cursor.fetchone.side_effect = [None, None, ("v-2",)]
        assert db.get_or_create_vendor("AcmeMed", "AcmeMed") == ("v-2", False)
        assert cursor.execute.call_count == 3


class TestManufacturers:

    def test_creates_manufacturer(self, db, cursor):
        cursor.fetchone.side_effect = [None, ("M1",)]
        assert db.get_or_create_manufacturer("M1", "Acme") == ("M1", True)

    def test_existing_manufacturer_keeps_name(self, db, cursor):
        cursor.fetchone.return_value = ("M1",)
        assert db.get_or_create_manufacturer("M1", "Renamed") == ("M1", False)
        for call in cursor.execute.call_args_list:
            assert "UPDATE" not in call.args[0]


class TestProducts:

    def test_find_products_single_query(self, db, cursor):
        cursor.fetchall.return_value = [{"product_id": "P1", "doc_id": "d1"}]

        products = db.find_products({"P1", "P2"})

        assert products == {"P1": {"product_id": "P1", "doc_id": "d1"}}
        cursor.execute.assert_called_once()
        assert "ANY(%s)" in cursor.execute.call_args.args[0]

    def test_find_products_empty(self, db, pool):
        assert db.find_products([]) == {}
        pool.getconn.assert_not_called()

    def test_upsert_is_one_batch(self, db, cursor):
        with patch("models.database.psycopg2.extras.execute_batch") as execute_batch:
            count = db.upsert_products([full_instruction("P1"), full_instruction("P2")])

        assert count == 2
        execute_batch.assert_called_once()
        _, query, params_list = execute_batch.call_args.args
        assert "ON CONFLICT (product_id) DO UPDATE SET" in query
        assert [params["product_id"] for params in params_list] == ["P1", "P2"]

    def test_doc_id_is_insert_only(self, db):
        with patch("models.database.psycopg2.extras.execute_batch") as execute_batch:
            db.upsert_products([full_instruction()])

        query = execute_batch.call_args.args[1]
        update_clause = query.split("DO UPDATE SET", 1)[1]
        assert "doc_id" not in update_clause
        assert "options" not in update_clause
        for column in PRODUCT_UPDATE_COLUMNS:
            assert f"{column} = EXCLUDED.{column}" in update_clause

    def test_json_columns_are_wrapped(self, db):
        with patch("models.database.psycopg2.extras.execute_batch") as execute_batch:
            db.upsert_products([full_instruction()])

        params = execute_batch.call_args.args[2][0]
        for column in ("variants", "images", "options", "info", "data_public"):
            assert isinstance(params[column], psycopg2.extras.Json)
        assert params["name"] == "name-value"

    def test_empty_upsert(self, db, pool):
        assert db.upsert_products([]) == 0
        pool.getconn.assert_not_called()


class TestSchema:

    def test_unique_keys(self, db, cursor):
        db.ensure_schema()
        sql = cursor.execute.call_args.args[0]
        assert "name TEXT NOT NULL UNIQUE" in sql
        assert "manufacturer_id TEXT PRIMARY KEY" in sql
        assert "product_id TEXT PRIMARY KEY" in sql
