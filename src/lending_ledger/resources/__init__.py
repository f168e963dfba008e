"""Lending Ledger MCP Resources Package

Resources are the read-only endpoints of the server; state changes go
through tools.
"""

from .loans import loan_resources

all_resources = loan_resources

__all__ = [
    "all_resources",
    "loan_resources",
]
