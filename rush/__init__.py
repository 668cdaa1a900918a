# rush/__init__.py
"""rush: an interactive shell with alias chaining and iconified listings."""

__version__ = "0.3.0"
