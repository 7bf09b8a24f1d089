"""redoc: capture developer brain dumps for git changes."""

__version__ = "0.3.0"
