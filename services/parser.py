# services/parser.py
import csv
import codecs
from contextlib import nullcontext
import logging
from config.settings import FILE_DELIMITER, ENCODING, MAX_FIELD_SIZE
from exceptions import StreamReadError
from models.catalog import Row

logger = logging.getLogger(__name__)

csv.field_size_limit(MAX_FIELD_SIZE)

REPLACEMENT_CHARACTER = '\ufffd'

class FileParser:
    """Streams rows out of the supplier feed"""

    def __init__(self, source, encoding=None):
        """
        Args:
            source (str | Path | TextIO): Path to the feed or an open text stream
            encoding (str, optional): Overrides BOM detection for paths
        """
        self.source = source
        self.encoding = encoding

    @property
    def source_name(self):
        return getattr(self.source, 'name', None) or str(self.source)

    def iter_rows(self):
        """
        Lazily yield one Row per data line

        The first line is always discarded; field names come from the fixed
        column list regardless of what that line contains.

        Raises:
            StreamReadError: If the source cannot be opened or read
        """
        line_count = 0
        try:
            with self._open() as stream:
                for row in self._read(stream):
                    line_count += 1
                    yield row
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Error reading file {self.source_name}: {str(e)}")
            raise StreamReadError(self.source_name, str(e)) from e

        logger.info(f"File parsing complete. Read {line_count} rows from {self.source_name}.")

    def _open(self):
        if hasattr(self.source, 'read'):
            return nullcontext(self.source)
        # Undecodable bytes become U+FFFD instead of aborting the run
        return open(self.source, 'r', encoding=self._detect_encoding(), errors='replace', newline='')

    def _detect_encoding(self):
        if self.encoding:
            return self.encoding

        with open(self.source, 'rb') as f:
            first_bytes = f.read(4)

        # Handle BOM if present (UTF-8, UTF-16, etc.)
        if first_bytes.startswith(codecs.BOM_UTF8):
            return 'utf-8-sig'
        if first_bytes.startswith(codecs.BOM_UTF16_LE) or first_bytes.startswith(codecs.BOM_UTF16_BE):
            return 'utf-16'
        return ENCODING

    def _read(self, stream):
        # Quotes are literal in this feed (e.g. 4"x4" gauze)
        reader = csv.reader(stream, delimiter=FILE_DELIMITER, quoting=csv.QUOTE_NONE)
        header = next(reader, None)
        if header is not None:
            logger.debug(f"Skipping header line with {len(header)} columns")

        for values in reader:
            if not any(value.strip() for value in values):
                continue
            if any(REPLACEMENT_CHARACTER in value for value in values):
                logger.warning(f"Undecodable bytes replaced on line {reader.line_num} of {self.source_name}")
            yield Row.from_values(values)
