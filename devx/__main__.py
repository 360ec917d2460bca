"""Entry point for running devx as a module.

This allows running the application with:
    python -m devx [COMMAND] [OPTIONS]
"""

from devx.cli import app

if __name__ == "__main__":
    app()
