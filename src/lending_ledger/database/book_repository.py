"""
Book repository implementation for the Lending Ledger.

Catalog maintenance for books. The copy counters are owned by the lending
ledger; this repository only lets callers set them to values that keep
``0 <= available_copies <= total_copies``.
"""

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import func, select

from ..database.schema import Author as AuthorDB
from ..database.schema import Book as BookDB
from ..database.session import safe_query
from ..models.book import Book as BookModel
from .repository import (
    AuthorNotFoundError,
    BaseRepository,
    BookNotFoundError,
    CopyCountError,
    PaginatedResponse,
    PaginationParams,
)


class BookCreateSchema(BaseModel):
    """Schema for creating a new book."""

    title: str = Field(..., min_length=1, max_length=200)
    author_id: int | None = None
    genre: str | None = Field(None, max_length=50)
    published_year: int | None = Field(None, gt=0)
    total_copies: int = Field(default=1, ge=0)
    available_copies: int | None = Field(
        default=None, ge=0, description="Defaults to total_copies"
    )

    @model_validator(mode="after")
    def default_available_copies(self) -> "BookCreateSchema":
        if self.available_copies is None:
            self.available_copies = self.total_copies
        if self.available_copies > self.total_copies:
            raise ValueError("Available copies cannot exceed total copies")
        return self


class BookUpdateSchema(BaseModel):
    """Schema for updating a book - all fields optional."""

    title: str | None = Field(None, min_length=1, max_length=200)
    author_id: int | None = None
    genre: str | None = Field(None, max_length=50)
    published_year: int | None = Field(None, gt=0)
    total_copies: int | None = Field(None, ge=0)
    available_copies: int | None = Field(None, ge=0)


class BookSearchParams(BaseModel):
    """Search parameters for finding books."""

    title: str | None = None  # Title contains
    genre: str | None = None  # Exact genre match
    author_id: int | None = None
    available_only: bool = False  # Only books with a copy on the shelf


class BookRepository(BaseRepository[BookDB, BookCreateSchema, BookUpdateSchema, BookModel]):
    """Repository for book data access."""

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    @property
    def not_found_error(self):
        return BookNotFoundError

    def create(self, data: BookCreateSchema) -> BookModel:
        """
        Create a book.

        Raises:
            AuthorNotFoundError: If author_id is set and unknown
        """
        self._check_author(data.author_id)
        return super().create(data)

    def _check_author(self, author_id: int | None) -> None:
        if author_id is None:
            return
        count = safe_query(
            self.session,
            lambda s: s.execute(
                select(func.count()).select_from(AuthorDB).where(AuthorDB.id == author_id)
            ).scalar(),
            "Failed to check author",
        )
        if not count:
            raise AuthorNotFoundError(f"Author {author_id} not found")

    def _validate_update(self, db_obj: BookDB, changes: dict) -> None:
        """Reject updates that would break the copy-count invariant."""
        if "author_id" in changes:
            self._check_author(changes["author_id"])

        total = changes.get("total_copies", db_obj.total_copies)
        available = changes.get("available_copies", db_obj.available_copies)
        if total is None or available is None:
            raise CopyCountError("Copy counts cannot be cleared")
        if not 0 <= available <= total:
            raise CopyCountError(
                f"Available copies ({available}) must be between 0 and "
                f"total copies ({total})"
            )

    def search(
        self,
        search_params: BookSearchParams,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResponse[BookModel]:
        """
        Search for books, ordered by title.

        Args:
            search_params: Search and filter criteria
            pagination: Pagination parameters (default: first page of 20)
        """
        if pagination is None:
            pagination = PaginationParams()
        pagination.validate_params()

        filters = []
        if search_params.title:
            filters.append(BookDB.title.ilike(f"%{search_params.title}%"))
        if search_params.genre:
            filters.append(BookDB.genre == search_params.genre)
        if search_params.author_id is not None:
            filters.append(BookDB.author_id == search_params.author_id)
        if search_params.available_only:
            filters.append(BookDB.available_copies > 0)

        query = select(BookDB).execution_options(populate_existing=True)
        if filters:
            query = query.where(*filters)
        count_query = select(func.count()).select_from(query.subquery())
        total = (
            safe_query(
                self.session,
                lambda s: s.execute(count_query).scalar(),
                "Failed to count books",
            )
            or 0
        )

        query = (
            query.order_by(BookDB.title, BookDB.id)
            .offset(pagination.offset)
            .limit(pagination.page_size)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to search books",
        )

        return PaginatedResponse(
            items=[self._to_response_model(book) for book in results],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=(total + pagination.page_size - 1) // pagination.page_size,
            has_next=pagination.page * pagination.page_size < total,
            has_previous=pagination.page > 1,
        )
