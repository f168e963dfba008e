"""
Repository pattern implementation for the Lending Ledger.

Repositories keep SQL out of the service layer:

1. **Separation**: Tools and resources deal in Pydantic models, never rows
2. **Testability**: Each repository needs nothing but a session
3. **Consistency**: Every data access path goes through safe_query/safe_commit
4. **Errors**: Failures surface as RepositoryException subclasses

The base repository provides common CRUD operations; the catalog and ledger
repositories add domain-specific queries and guarded mutations.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.schema import Base
from ..database.session import safe_commit, safe_query

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class RepositoryException(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryException):
    """Raised when an entity is not found."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""


class AuthorNotFoundError(NotFoundError):
    """Raised when an author id is unknown."""


class BookNotFoundError(NotFoundError):
    """Raised when a book id is unknown."""


class MemberNotFoundError(NotFoundError):
    """Raised when a member id is unknown."""


class TransactionNotFoundError(NotFoundError):
    """Raised when a return names an unknown transaction."""


class BookUnavailableError(RepositoryException):
    """Raised when an issue is attempted with no copies on the shelf."""


class AlreadyReturnedError(RepositoryException):
    """Raised when a closed transaction is returned again."""


class CopyCountError(RepositoryException):
    """Raised when a change would move available copies outside [0, total]."""


class PaginationParams(BaseModel):
    """Standard pagination parameters for list operations."""

    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def validate_params(self) -> None:
        if self.page < 1:
            raise ValueError("Page must be >= 1")
        if self.page_size < 1 or self.page_size > 100:
            raise ValueError("Page size must be between 1 and 100")


class PaginatedResponse(BaseModel, Generic[ResponseSchemaType]):
    """Standard paginated response for list operations."""

    items: list[ResponseSchemaType]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


def integrity_error_to_exception(error: IntegrityError, entity: str) -> RepositoryException:
    """Map a constraint violation to the matching repository exception."""
    message = str(error.orig).lower()
    if "unique" in message or "duplicate" in message:
        return DuplicateError(f"{entity} already exists: {error.orig}")
    return RepositoryException(f"{entity} violates a database constraint: {error.orig}")


class BaseRepository(
    ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType, ResponseSchemaType]
):
    """
    Abstract base repository providing common CRUD operations.

    Entities are addressed by integer id. Writes flush before committing so
    constraint violations surface as DuplicateError/RepositoryException.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    @property
    def not_found_error(self) -> type[NotFoundError]:
        return NotFoundError

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _get_db_obj(self, id: int) -> ModelType | None:
        query = (
            select(self.model_class)
            .where(self.model_class.id == id)
            .execution_options(populate_existing=True)
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            f"Failed to get {self.model_class.__name__} by ID",
        )

    def get_by_id(self, id: int) -> ResponseSchemaType | None:
        """
        Get entity by ID.

        Returns:
            Pydantic model or None if not found
        """
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def get_all(
        self,
        pagination: PaginationParams | None = None,
        order_by: str | None = None,
        order_desc: bool = False,
    ) -> list[ResponseSchemaType] | PaginatedResponse[ResponseSchemaType]:
        """
        Get all entities with optional pagination and sorting.

        Args:
            pagination: Pagination parameters
            order_by: Field name to order by (default: id)
            order_desc: Whether to order descending

        Returns:
            List of entities, or a paginated response when pagination is given
        """
        query = select(self.model_class).execution_options(populate_existing=True)

        order_field = self.model_class.id
        if order_by and hasattr(self.model_class, order_by):
            order_field = getattr(self.model_class, order_by)
        query = query.order_by(desc(order_field) if order_desc else asc(order_field))

        if pagination:
            pagination.validate_params()

            count_query = select(func.count()).select_from(self.model_class)
            total = (
                safe_query(
                    self.session,
                    lambda s: s.execute(count_query).scalar(),
                    "Failed to get total count",
                )
                or 0
            )

            query = query.offset(pagination.offset).limit(pagination.page_size)
            results = safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get paginated results",
            )

            return PaginatedResponse(
                items=[self._to_response_model(item) for item in results],
                total=total,
                page=pagination.page,
                page_size=pagination.page_size,
                total_pages=(total + pagination.page_size - 1) // pagination.page_size,
                has_next=pagination.page * pagination.page_size < total,
                has_previous=pagination.page > 1,
            )

        results = safe_query(
            self.session, lambda s: s.execute(query).scalars().all(), "Failed to get all results"
        )
        return [self._to_response_model(item) for item in results]

    def create(self, data: CreateSchemaType) -> ResponseSchemaType:
        """
        Create new entity.

        Raises:
            DuplicateError: If a unique constraint is violated
            RepositoryException: On other database errors
        """
        name = self.model_class.__name__
        try:
            db_obj = self.model_class(**data.model_dump())
            self.session.add(db_obj)
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise integrity_error_to_exception(e, name) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryException(f"Database error: {e!s}") from e

        safe_commit(self.session, f"create {name}")
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def update(self, id: int, data: UpdateSchemaType) -> ResponseSchemaType:
        """
        Update existing entity with the fields set on ``data``.

        Raises:
            NotFoundError: If the entity does not exist
            RepositoryException: On database errors
        """
        name = self.model_class.__name__
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            raise self.not_found_error(f"{name} {id} not found")

        changes = data.model_dump(exclude_unset=True)
        self._validate_update(db_obj, changes)

        try:
            for field, value in changes.items():
                setattr(db_obj, field, value)
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise integrity_error_to_exception(e, name) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryException(f"Update failed: {e!s}") from e

        safe_commit(self.session, f"update {name}")
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def _validate_update(self, db_obj: ModelType, changes: dict) -> None:
        """Hook for entity-specific checks before an update is applied."""

    def delete(self, id: int) -> bool:
        """
        Delete entity by ID, cascading to dependent rows.

        Returns:
            True if deleted, False if not found
        """
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            return False

        try:
            self.session.delete(db_obj)
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryException(f"Delete failed: {e!s}") from e

        safe_commit(self.session, f"delete {self.model_class.__name__}")
        return True

    def exists(self, id: int) -> bool:
        query = select(func.count()).select_from(self.model_class).where(self.model_class.id == id)
        count = safe_query(
            self.session, lambda s: s.execute(query).scalar(), "Failed to check existence"
        )
        return count > 0
