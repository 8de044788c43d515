"""notebookchat entry point.

Changes:
  - 2026-10-09: --dev runs uvicorn with auto-reload.
  - 2026-10-08: Rich logging configured from LOG_LEVEL before the server starts.
"""

import argparse
import logging

from notebookchat import __version__
from notebookchat.config import get_settings
from notebookchat.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="\U0001f4d3 notebookchat - chat with the sources of your NotebookLM notebooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  notebookchat                       Serve the API on 127.0.0.1:8000
  notebookchat --host 0.0.0.0        Listen on all interfaces
  notebookchat --dev                 Auto-reload on source changes
""",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--dev", action="store_true", help="Development mode with auto-reload")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level="DEBUG" if args.dev else settings.log_level)

    if not settings.oauth_configured:
        logger.warning(
            "GOOGLE_CLOUD_CLIENT_ID / GOOGLE_CLOUD_CLIENT_SECRET not set; "
            "sign-in is disabled and fallback credentials will be used"
        )

    from notebookchat.api.serve import run_api_server

    try:
        run_api_server(host=args.host, port=args.port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("\U0001f44b notebookchat stopped.")


if __name__ == "__main__":
    main()
