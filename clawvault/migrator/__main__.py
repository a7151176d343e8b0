"""Entry point for running the migrator module as a script.

Usage:
    python -m clawvault.migrator migrate --apply
"""

from .cli import main

if __name__ == "__main__":
    main()
