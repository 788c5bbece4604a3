"""
Logging setup for the carbon budget workflow.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


FORMATS = {
    'standard': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'simple': '%(levelname)s: %(message)s',
}


def setup_logging(
    level: Union[str, int] = 'INFO',
    log_file: Optional[Union[str, Path]] = None,
    format_style: str = 'standard'
) -> logging.Logger:
    """
    Configure console (and optionally file) logging for the package.

    Parameters
    ----------
    level : str or int
        Logging level name or constant
    log_file : str or Path, optional
        If given, messages are also written to this file
    format_style : str
        One of 'standard' or 'simple'

    Returns
    -------
    logging.Logger
        The 'neon_carbon' package logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger('neon_carbon')
    logger.handlers.clear()
    logger.setLevel(level)

    formatter = logging.Formatter(
        FORMATS.get(format_style, FORMATS['standard']),
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
