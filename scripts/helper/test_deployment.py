#!/usr/bin/env python3
"""Smoke-test a deployed instance through its health endpoint."""

import sys
import argparse
import logging

import requests

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def check_deployment(base_url: str, timeout: float = 10) -> bool:
    url = f"{base_url.rstrip('/')}/health"
    logger.info(f"Checking {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        logger.error(f"Health check failed: {e}")
        return False
    except ValueError:
        logger.error("Health endpoint did not return JSON")
        return False

    logger.info(f"Status: {data.get('status')}")
    logger.info(f"Environment: {data.get('environment')}")
    logger.info(f"Port: {data.get('port')}")
    logger.info(f"Database: {data.get('database')}")

    if data.get('database') != 'connected':
        logger.warning("Service is up but the database is not connected")
    return data.get('status') == 'ok'

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Check a deployed instance')
    parser.add_argument('base_url', nargs='?', default='http://localhost:8080', help='Base URL of the deployment')
    parser.add_argument('--timeout', type=float, default=10, help='Request timeout in seconds')
    args = parser.parse_args()

    sys.exit(0 if check_deployment(args.base_url, args.timeout) else 1)
