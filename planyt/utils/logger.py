import logging
import os
import sys

logger_name = 'planyt'

logger = logging.getLogger(logger_name)
logger.setLevel(os.getenv("PLANYT_LOG_LEVEL", "INFO").upper())
# Output goes only through the handlers below
logger.propagate = False

formatter = logging.Formatter("{asctime} - {name} - {levelname} - {message}", style="{", datefmt="%Y-%m-%d %H:%M:%S")

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Empty PLANYT_LOG_FILE disables the file log
    log_file = os.getenv("PLANYT_LOG_FILE", f"{logger_name}.log")
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8", mode="a", delay=True)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
