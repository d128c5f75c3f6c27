"""CORS configuration for the FastAPI application."""

from .environment import IS_PRODUCTION_ENVIRONMENT

# CORS Origins configuration
ALLOWED_ORIGINS = {
    False: ["http://localhost:8080", "http://127.0.0.1:8080"],  # Development
    True: [        # Production - restricted
        "https://ellarises.org",
        "https://www.ellarises.org",
    ]
}

# CORS Methods configuration
ALLOWED_METHODS = [
    "GET",      # Availability, listings
    "POST",     # Bookings, login, admin writes
    "PUT",      # Admin updates
    "DELETE",   # Admin deletes
    "OPTIONS"   # Required for CORS preflight
]

# CORS Headers configuration
ALLOWED_HEADERS = [
    "Content-Type",
    "Accept",
]

# Credentials are required for the session cookie, so origins can't be "*"
CORS_CONFIG = {
    "allow_origins": ALLOWED_ORIGINS[IS_PRODUCTION_ENVIRONMENT],
    "allow_credentials": True,
    "allow_methods": ALLOWED_METHODS,
    "allow_headers": ALLOWED_HEADERS,
    "expose_headers": [],
    "max_age": 3600,
}
