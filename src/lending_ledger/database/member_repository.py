"""
Member repository implementation for the Lending Ledger.

Members are created once, updated occasionally and deleted together with
their loan history. The loan history query lists every book the member
has borrowed, newest first.
"""

import logging
from datetime import date

from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import desc, select

from ..database.schema import Book as BookDB
from ..database.schema import Member as MemberDB
from ..database.schema import Transaction as TransactionDB
from ..database.session import safe_query
from ..models.member import Member as MemberModel
from ..models.transaction import LoanHistoryEntry
from .repository import BaseRepository, MemberNotFoundError

logger = logging.getLogger(__name__)


class MemberCreateSchema(BaseModel):
    """Schema for registering a member."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=15)
    membership_date: date = Field(default_factory=date.today)


class MemberUpdateSchema(BaseModel):
    """Schema for updating a member - all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=15)


class MemberRepository(
    BaseRepository[MemberDB, MemberCreateSchema, MemberUpdateSchema, MemberModel]
):
    """Repository for member data access."""

    @property
    def model_class(self):
        return MemberDB

    @property
    def response_schema(self):
        return MemberModel

    @property
    def not_found_error(self):
        return MemberNotFoundError

    def get_by_email(self, email: str) -> MemberModel | None:
        member = safe_query(
            self.session,
            lambda s: s.execute(
                select(MemberDB).where(MemberDB.email == email)
            ).scalar_one_or_none(),
            "Failed to get member by email",
        )
        return self._to_response_model(member) if member else None

    def get_loan_history(
        self, member_id: int, include_returned: bool = True
    ) -> list[LoanHistoryEntry]:
        """
        List the books a member has borrowed, newest loan first.

        Args:
            member_id: Member to report on
            include_returned: Include closed loans as well as open ones

        Raises:
            MemberNotFoundError: If the member does not exist
        """
        if not self.exists(member_id):
            raise MemberNotFoundError(f"Member {member_id} not found")

        query = (
            select(
                TransactionDB.id,
                TransactionDB.book_id,
                BookDB.title,
                TransactionDB.issue_date,
                TransactionDB.return_date,
            )
            .join(BookDB, TransactionDB.book_id == BookDB.id)
            .where(TransactionDB.member_id == member_id)
            .order_by(desc(TransactionDB.issue_date), desc(TransactionDB.id))
        )
        if not include_returned:
            query = query.where(TransactionDB.return_date.is_(None))

        rows = safe_query(
            self.session,
            lambda s: s.execute(query).all(),
            "Failed to get member loan history",
        )
        return [
            LoanHistoryEntry(
                transaction_id=row.id,
                book_id=row.book_id,
                book_title=row.title,
                issue_date=row.issue_date,
                return_date=row.return_date,
            )
            for row in rows
        ]

    def delete(self, id: int) -> bool:
        """Delete a member together with all of their transactions."""
        deleted = super().delete(id)
        if deleted:
            logger.info("Deleted member %s with their loan history", id)
        return deleted
