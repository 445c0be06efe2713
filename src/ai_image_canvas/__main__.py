"""
Entry point for running AI Image Canvas as a module.

Usage:
    python -m ai_image_canvas
"""

import sys

from ai_image_canvas.main import main

if __name__ == "__main__":
    sys.exit(main())
