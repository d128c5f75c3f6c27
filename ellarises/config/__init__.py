"""Configuration package.

``ellarises.config.environment`` must be imported before anything that reads
environment variables.
"""
