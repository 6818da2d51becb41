"""
Run script for starting the Voice Consult server.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os
import sys
from pathlib import Path

import uvicorn

sys.path.append(str(Path(__file__).parent))

from voice_consult.config.logging_config import configure_logging

logger = configure_logging()


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Start the Voice Consult server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run the server on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args()


def main():
    """Main entry point for starting the server."""
    args = parse_args()

    # Calls can't start without the provider key, but the server still serves status
    if not os.getenv("VAPI_API_KEY"):
        logger.warning("VAPI_API_KEY environment variable not set; calls will fail to start")

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")
    logger.info(f"Assistant id configured: {bool(os.getenv('VAPI_ASSISTANT_ID'))}")

    uvicorn.run(
        "voice_consult.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        http="h11",
        access_log=False,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
