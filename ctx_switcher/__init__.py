"""
ctx - switch between named shell contexts.
Path: ctx_switcher/__init__.py
"""

__version__ = "0.3.0"
