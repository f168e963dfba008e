"""
Lending Ledger Package.

Copy-count accounting for a small book-lending library: authors, books,
members and loan transactions, with guarded issue/return operations and an
overdue report, served over MCP.

Key Components:
- models: Pydantic models for validation and serialization
- database: SQLAlchemy schema, sessions, repositories and the ledger
- config: Configuration management with Pydantic v2
- tools: issue_book / return_book MCP tools
- resources: overdue and open-loan MCP resources
"""

__version__ = "0.1.0"

from . import database

__all__ = [
    "__version__",
    "database",
]
