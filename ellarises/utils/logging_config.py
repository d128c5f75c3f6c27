"""Logging configuration for the application."""

import logging
import os
import sys

_configured = False

def setup_logging():
    """Configure logging for the application.

    Safe to call more than once; only the first call installs the handler.
    """
    global _configured
    if _configured:
        return

    # Create a formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Create a console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # Configure the root logger
    level = logging.DEBUG if os.environ.get('LOG_LEVEL', '').lower() == 'debug' else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Set higher log levels for noisy components
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('passlib').setLevel(logging.ERROR)

    _configured = True
