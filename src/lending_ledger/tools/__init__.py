"""
MCP Tools for the Lending Ledger.

Tools are the operations with side effects. Each entry is a dictionary with
name, description, input schema and async handler, registered by the server.
"""

from .lending import issue_book, return_book

all_tools = [
    issue_book,
    return_book,
]

__all__ = [
    "all_tools",
    "issue_book",
    "return_book",
]
