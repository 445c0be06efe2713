"""
AI Image Canvas - Main Entry Point

Serves the canvas HTTP API with uvicorn.
"""

from __future__ import annotations

import argparse
import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-image-canvas",
        description="Serve the AI Image Canvas chat API.",
    )
    parser.add_argument("--host", help="Bind address (default from CANVAS_HOST)")
    parser.add_argument("--port", type=int, help="Port (default from CANVAS_PORT)")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Answer image calls with placeholder images",
    )
    parser.add_argument("--log-level", help="Logging level (default from CANVAS_LOG_LEVEL)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for AI Image Canvas.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if sys.version_info < (3, 11):
        print("Error: AI Image Canvas requires Python 3.11 or later")
        return 1

    args = build_parser().parse_args(argv)

    # Import here to keep --help fast
    import uvicorn

    from ai_image_canvas.api.main import create_app
    from ai_image_canvas.core.config import CanvasSettings

    overrides = {
        key: value
        for key, value in {
            "host": args.host,
            "port": args.port,
            "log_level": args.log_level,
            "debug": True if args.debug else None,
        }.items()
        if value is not None
    }
    settings = CanvasSettings(**overrides)
    configure_logging(settings.log_level)

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
