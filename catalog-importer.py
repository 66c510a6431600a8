# Project Structure
'''
catalog-importer/
├── config/
│   ├── __init__.py
│   └── settings.py
├── exceptions/
│   ├── __init__.py
│   └── errors.py
├── models/
│   ├── __init__.py
│   ├── catalog.py
│   └── database.py
├── services/
│   ├── __init__.py
│   ├── parser.py
│   ├── variants.py
│   ├── resolver.py
│   ├── merge.py
│   ├── enhancer.py
│   ├── writer.py
│   └── etl.py
├── utils/
│   ├── __init__.py
│   └── logger.py
├── tests/
├── .env.example
├── catalog-importer.py
└── pyproject.toml
'''

# Main application script - catalog-importer.py
import argparse
import signal
import sys
import time
from datetime import datetime

from config.settings import load_env, get_import_config
from exceptions import StreamReadError
from models.database import DatabaseManager
from services.enhancer import get_description_enhancer
from services.etl import ETLProcessor
from utils.logger import setup_logger

def main():
    # Load environment variables
    load_env()
    import_config = get_import_config()

    # Set up argument parser
    parser = argparse.ArgumentParser(description='Product catalog feed importer')
    parser.add_argument('source_file', nargs='?', default=import_config['source_file'],
                        help='Path to the tab-delimited catalog feed')
    parser.add_argument('--chunk-size', type=int, default=import_config['chunk_size'],
                        help='Rows reconciled and written per batch')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Set logging level')
    parser.add_argument('--init-schema', action='store_true',
                        help='Create catalog tables before importing')
    args = parser.parse_args()

    # Set up logging
    log_file = f"importer_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    logger = setup_logger(args.log_level, log_file)

    logger.info(f"Starting catalog import from {args.source_file}")
    start_time = time.time()

    db_manager = None
    try:
        db_manager = DatabaseManager()
        if args.init_schema:
            db_manager.ensure_schema()

        etl = ETLProcessor(
            db_manager,
            enhancer=get_description_enhancer(),
            chunk_size=args.chunk_size,
            sku_separator=import_config['sku_separator'],
        )

        # Stop at the next chunk boundary instead of mid-batch
        def request_stop(signum, frame):
            logger.warning(f"Received signal {signum}, stopping after the current chunk")
            etl.cancel()

        signal.signal(signal.SIGTERM, request_stop)
        signal.signal(signal.SIGINT, request_stop)

        summary = etl.process_file(args.source_file)

        elapsed_time = time.time() - start_time
        logger.info(f"Import completed in {elapsed_time:.2f} seconds")
        logger.info(f"Statistics: {summary.as_dict()}")

    except StreamReadError as e:
        logger.error(f"Import aborted: {e.to_dict()}")
        return 1
    except Exception as e:
        logger.error(f"Import failed: {str(e)}", exc_info=True)
        return 1
    finally:
        if db_manager is not None:
            db_manager.close()

    return 0

if __name__ == "__main__":
    sys.exit(main())
