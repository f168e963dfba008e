"""
Author repository implementation for the Lending Ledger.

Supports author CRUD plus the author -> books relationship. Deleting an
author is the widest cascade in the schema: every book by the author goes,
and every loan of those books with them.
"""

import logging
from datetime import date

from pydantic import BaseModel
from sqlalchemy import select

from ..database.schema import Author as AuthorDB
from ..database.schema import Book as BookDB
from ..database.session import safe_query
from ..models.author import Author as AuthorModel
from ..models.book import Book as BookModel
from .repository import AuthorNotFoundError, BaseRepository

logger = logging.getLogger(__name__)


class AuthorCreateSchema(BaseModel):
    """Schema for creating a new author."""

    name: str
    birth_date: date | None = None
    nationality: str | None = None


class AuthorUpdateSchema(BaseModel):
    """Schema for updating an author - all fields optional."""

    name: str | None = None
    birth_date: date | None = None
    nationality: str | None = None


class AuthorRepository(
    BaseRepository[AuthorDB, AuthorCreateSchema, AuthorUpdateSchema, AuthorModel]
):
    """Repository for author data access."""

    @property
    def model_class(self):
        return AuthorDB

    @property
    def response_schema(self):
        return AuthorModel

    @property
    def not_found_error(self):
        return AuthorNotFoundError

    def get_books(self, author_id: int) -> list[BookModel]:
        """
        Get all books written by an author, ordered by title.

        Raises:
            AuthorNotFoundError: If the author does not exist
        """
        if not self.exists(author_id):
            raise AuthorNotFoundError(f"Author {author_id} not found")

        query = select(BookDB).where(BookDB.author_id == author_id).order_by(BookDB.title)
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get books by author",
        )
        return [BookModel.model_validate(book, from_attributes=True) for book in results]

    def delete(self, id: int) -> bool:
        """Delete an author together with their books and those books' loans."""
        deleted = super().delete(id)
        if deleted:
            logger.info("Deleted author %s with all of their books and loans", id)
        return deleted
