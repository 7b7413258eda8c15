"""Entry point for running Sprint0 as a module.

Usage:
    python -m sprint0 [command] [options]

Example:
    python -m sprint0 assess --repo . --title "Add Redis caching" --stdout
    python -m sprint0 classify "Migrate the orders service to PostgreSQL"
"""

from sprint0.cli import app

if __name__ == "__main__":
    app()
