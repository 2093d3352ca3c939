#!/usr/bin/env python3
"""
CLI tool to start the events FastAPI web server.

This script provides a convenient command-line interface to start the
FastAPI backend server using uvicorn.

Usage:
    python3 web_server.py                    # Start with defaults
    python3 web_server.py --host 0.0.0.0     # Listen on all interfaces
    python3 web_server.py --port 8080        # Use custom port
    python3 web_server.py --reload           # Enable auto-reload for development

Environment Variables:
    EVENTS_DB_URL: Database URL
    EVENTS_TIMEZONE: IANA timezone used to expand recurring series
    EVENTS_ENV: Environment (production/development, default: development)
    EVENTS_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace with host, port, and reload flags
    """
    parser = argparse.ArgumentParser(
        description="Start the events FastAPI web server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start development server with auto-reload
  python3 web_server.py --reload

  # Start server on all interfaces (accessible from network)
  python3 web_server.py --host 0.0.0.0

Environment Variables:
  EVENTS_DB_URL          Database URL
  EVENTS_TIMEZONE        IANA timezone for series expansion (default: UTC)
  EVENTS_ENV             Environment (production/development)
  EVENTS_LOG_LEVEL       Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        """
    )

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind the server to (default: 127.0.0.1). "
             "Use 0.0.0.0 to listen on all interfaces."
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind the server to (default: 8000)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development. Not recommended for production."
    )

    return parser.parse_args()


def main() -> None:
    """
    Main entry point for the web server CLI tool.

    Exit Codes:
        0: Server stopped normally
    """
    args = parse_arguments()

    # Ensure the repo root is on sys.path so "backend.src.main" is importable
    repo_root = str(Path(__file__).parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)

    # Explicit environment variables take precedence over .env values
    load_dotenv(Path(__file__).parent / ".env", override=False)

    import uvicorn

    print("\nStarting events web server...")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Auto-reload: {'enabled' if args.reload else 'disabled'}")
    print(f"\nAPI documentation: http://{args.host}:{args.port}/docs")
    print(f"Health check: http://{args.host}:{args.port}/health")
    print("\nPress CTRL+C to stop the server\n")

    try:
        uvicorn.run(
            "backend.src.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="info",
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped by user (CTRL+C)")
        sys.exit(0)


if __name__ == "__main__":
    main()
