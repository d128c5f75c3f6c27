"""Main application entry point."""

from ellarises.config.environment import IS_PRODUCTION_ENVIRONMENT, PORT
from ellarises.api.app import app

if __name__ == "__main__":
    import uvicorn
    if not IS_PRODUCTION_ENVIRONMENT:
        # Development mode - use direct app instance for better debugging
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=PORT,
            log_level="debug"
        )
    else:
        # Production mode - use string reference for proper multi-worker support
        uvicorn.run(
            "ellarises.api.app:app",
            host="0.0.0.0",
            port=PORT,
            reload=False,
            workers=2,
            log_level="info",
            proxy_headers=True,
            forwarded_allow_ips="*"
        )
