"""
Entry point for running the server as a module.

Usage:
    python -m compliancebot.server
    python -m compliancebot.server --port 3000 --host 0.0.0.0
"""

from .cli import main

if __name__ == "__main__":
    main()
