# utils/logger.py
import logging
import sys
from pathlib import Path

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ('paramiko', 'sshtunnel', 'httpx', 'openai')

def setup_logger(level_name, log_file=None, logs_dir=None):
    """
    Configure the root logger for an import run

    Args:
        level_name (str): Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file (str, optional): Log file name. Defaults to None.
        logs_dir (Path, optional): Directory for log_file. Defaults to ./logs
            next to the project root.

    Returns:
        logging.Logger: Configured root logger
    """
    level = getattr(logging, level_name.upper())

    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        logs_dir = Path(logs_dir) if logs_dir else Path(__file__).parent.parent / 'logs'
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(logs_dir / log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger
