"""
Tests for the catalog-importer.py entry point.
"""

import importlib.util
import logging
from pathlib import Path

import pytest

from services.enhancer import DescriptionEnhancer
from tests.conftest import InMemoryCatalogStore
from tests.factories import feed_text

SCRIPT = Path(__file__).parent.parent / "catalog-importer.py"


class ClosableStore(InMemoryCatalogStore):

    def __init__(self):
        super().__init__()
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def cli(monkeypatch):
    spec = importlib.util.spec_from_file_location("catalog_importer", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    store = ClosableStore()
    monkeypatch.setattr(module, "load_env", lambda: None)
    monkeypatch.setattr(module, "setup_logger", lambda level, log_file=None: logging.getLogger())
    monkeypatch.setattr(module, "DatabaseManager", lambda: store)
    monkeypatch.setattr(module, "get_description_enhancer", DescriptionEnhancer)
    monkeypatch.setattr(module.signal, "signal", lambda signum, handler: None)
    module.store = store
    return module


class TestMain:

    def test_successful_run(self, cli, monkeypatch, tmp_path):
        path = tmp_path / "raw.txt"
        path.write_text(feed_text([{"ProductID": "P1"}]), encoding="utf-8")
        monkeypatch.setattr("sys.argv", ["catalog-importer.py", str(path)])

        assert cli.main() == 0
        assert "P1" in cli.store.products
        assert cli.store.closed

    def test_unreadable_feed_logs_error_details(self, cli, monkeypatch, tmp_path, caplog):
        monkeypatch.setattr("sys.argv", ["catalog-importer.py", str(tmp_path / "missing.txt")])

        assert cli.main() == 1
        assert "STREAM_READ_ERROR" in caplog.text
        assert "missing.txt" in caplog.text
        assert cli.store.closed
