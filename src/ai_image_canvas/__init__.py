"""
AI Image Canvas - A node canvas for composing image-generation workflows.
"""

__version__ = "0.1.0"
