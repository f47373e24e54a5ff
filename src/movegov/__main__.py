"""Entry point for running movegov as a module.

Usage:
    python -m movegov [command] [options]

Example:
    python -m movegov generate sources/counter.move --output build/
    python -m movegov discover sources/counter.move
"""

from movegov.cli import app

if __name__ == "__main__":
    app()
