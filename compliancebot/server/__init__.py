"""
Compliance Bot Server - HTTP surface for the document compliance workflow.

Run with:
    compliancebot-server            # CLI entry point
    python -m compliancebot.server  # Module entry point

Or programmatically:
    from compliancebot.server import ComplianceServer
    server = ComplianceServer(port=3000)
    server.run()
"""

from .app import ComplianceServer, create_app
from .config import ServerConfig
from .database import AIContextCache, Database, DocumentStore, get_database

__all__ = [
    "create_app",
    "ComplianceServer",
    "ServerConfig",
    "get_database",
    "Database",
    "DocumentStore",
    "AIContextCache",
]
