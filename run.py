import argparse
import logging

import uvicorn

from app.core.config import settings

logger = logging.getLogger("app")


def main():
    parser = argparse.ArgumentParser(description="Run the Snapfeed API server")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to run the server on (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes (default: based on DEBUG setting)"
    )

    args = parser.parse_args()

    use_reload = args.reload or settings.DEBUG

    if settings.DEBUG:
        logging.basicConfig(level=logging.DEBUG)
        logger.debug(f"Starting Snapfeed API in {settings.ENVIRONMENT} mode")
        logger.debug(f"Auto-reload: {'enabled' if use_reload else 'disabled'}")
        logger.debug(f"Swagger UI: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=use_reload
    )


if __name__ == "__main__":
    main()
