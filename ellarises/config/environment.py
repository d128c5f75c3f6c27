"""Environment configuration module.

This module MUST be imported before any other project modules that depend on environment variables.
It loads the .env file and sets up the environment configuration used by both the FastAPI app
and the standalone maintenance scripts.

Usage:
    from ellarises.config.environment import IS_PRODUCTION_ENVIRONMENT

Note:
    In production (Elastic Beanstalk / RDS) the variables are set directly in the
    platform's environment configuration and the .env file is simply absent.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables - this must happen before any other imports
load_dotenv()

# Environment configuration
env_setting = os.environ.get('ENVIRONMENT', '').lower()

if env_setting not in ['development', 'production']:
    logging.warning(
        f"Environment setting '{env_setting}' is invalid or not specified. "
        "Expected 'development' or 'production'. Defaulting to development environment."
    )
    env_setting = 'development'

ENVIRONMENT_NAME = env_setting
IS_PRODUCTION_ENVIRONMENT = env_setting == 'production'

PORT = int(os.environ.get('PORT', 8080))

# Signing key for the session cookie
SESSION_SECRET = os.environ.get('SESSION_SECRET', 'ella-rises-secret-key-change-in-production')
if IS_PRODUCTION_ENVIRONMENT and 'SESSION_SECRET' not in os.environ:
    logging.warning("SESSION_SECRET is not set; using the development default in production")

# Seconds to wait for the startup connectivity check
DB_CONNECT_TIMEOUT = float(os.environ.get('DB_CONNECT_TIMEOUT', 5))

__all__ = [
    'ENVIRONMENT_NAME',
    'IS_PRODUCTION_ENVIRONMENT',
    'PORT',
    'SESSION_SECRET',
    'DB_CONNECT_TIMEOUT',
]
