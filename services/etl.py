# services/etl.py
import logging
import threading
from itertools import islice
from config.settings import CHUNK_SIZE
from models.catalog import ChunkResult, RunSummary
from services.enhancer import DescriptionEnhancer
from services.merge import ChunkMerger
from services.parser import FileParser
from services.resolver import ReferenceResolver
from services.writer import BatchWriter

logger = logging.getLogger(__name__)

def iter_chunks(rows, chunk_size, stop_event=None):
    """
    Pull fixed-size chunks from a row iterator; the last one may be short

    Once stop_event is set no further rows are pulled.
    """
    iterator = iter(rows)
    while True:
        if stop_event is not None and stop_event.is_set():
            return
        chunk = list(islice(iterator, chunk_size))
        if not chunk:
            return
        yield chunk

class ETLProcessor:
    """
    Reconciles the supplier feed with the catalog store, one chunk at a time.

    An instance drives a single run and owns that run's reference cache.
    The next chunk is not read until the previous one has been written, so
    chunks are committed strictly in file order. A failed chunk is logged and
    recorded in the run summary and the run moves on; only an unreadable
    feed (StreamReadError) aborts the run.
    """

    def __init__(self, db_manager, enhancer=None, chunk_size=CHUNK_SIZE,
                 sku_separator='', cache=None, product_defaults=None):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.db = db_manager
        self.chunk_size = chunk_size
        self.resolver = ReferenceResolver(db_manager, cache)
        self.merger = ChunkMerger(
            db_manager,
            self.resolver,
            enhancer or DescriptionEnhancer(),
            product_defaults=product_defaults,
            sku_separator=sku_separator,
        )
        self.writer = BatchWriter(db_manager)
        self.summary = RunSummary()
        self._cancel_requested = threading.Event()

    def cancel(self):
        """Stop the run before the next chunk; a chunk in progress is finished first"""
        self._cancel_requested.set()

    def process_file(self, source):
        """
        Import a feed file or open text stream

        Raises:
            StreamReadError: If the feed cannot be read
        """
        logger.info(f"Starting product import from {source}")
        return self.process_rows(FileParser(source).iter_rows())

    def process_rows(self, rows):
        """
        Process all rows chunk by chunk

        Args:
            rows (iterable): Row objects in file order

        Returns:
            RunSummary: Per-chunk outcomes of this run
        """
        chunks = iter_chunks(rows, self.chunk_size, self._cancel_requested)
        for index, chunk in enumerate(chunks, 1):
            result = self._process_chunk(index, chunk)
            self.summary.chunks.append(result)
            logger.info(f"Processed chunk {index} ({self.summary.rows_read} rows so far)")

        if self._cancel_requested.is_set():
            logger.warning(f"Import cancelled after {len(self.summary.chunks)} chunk(s)")
            self.summary.cancelled = True

        self.summary.vendors_created = self.resolver.vendors_created
        self.summary.manufacturers_created = self.resolver.manufacturers_created

        failed = len(self.summary.failed_chunks)
        if failed:
            logger.warning(f"Product import completed with {failed} failed chunk(s)")
        else:
            logger.info("Product import completed")
        return self.summary

    def _process_chunk(self, index, chunk):
        result = ChunkResult(index=index, row_count=len(chunk))
        try:
            instructions, result.skipped_rows = self.merger.build_instructions(chunk)
            result.product_count = self.writer.write(instructions, index)
        except Exception as e:
            logger.error(f"Error processing chunk {index} ({len(chunk)} rows): {str(e)}", exc_info=True)
            result.error = str(e)
        return result
