"""Entry point for `python -m redoc`."""

from redoc.cli import app

if __name__ == "__main__":
    app()
