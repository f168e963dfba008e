"""Test configuration and fixtures for the Lending Ledger.

1. Isolated databases - each test gets its own SQLite file
2. Configuration overrides - settings come from a clean environment
3. Seeded catalog - three sample authors, books and members
4. Global state cleanup - configuration and database manager singletons are reset
"""

import os
from collections.abc import Generator
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from lending_ledger.config import reset_config
from lending_ledger.database.author_repository import AuthorCreateSchema, AuthorRepository
from lending_ledger.database.book_repository import BookCreateSchema, BookRepository
from lending_ledger.database.member_repository import MemberCreateSchema, MemberRepository
from lending_ledger.database.session import DatabaseManager, get_db_manager, reset_db_manager

# === Test Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_ledger.db"


@pytest.fixture
def test_database_url(test_db_path: Path) -> str:
    return f"sqlite:///{test_db_path}"


@pytest.fixture
def db_manager(test_database_url: str) -> Generator[DatabaseManager, None, None]:
    """Provide a database manager over a fresh file database."""
    manager = DatabaseManager(test_database_url)
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """Provide a session that tests drive directly."""
    session = db_manager.create_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clean_env(monkeypatch) -> None:
    """Remove every LENDING_LEDGER_* variable from the environment."""
    for key in list(os.environ):
        if key.startswith("LENDING_LEDGER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def global_db(clean_env, test_db_path: Path, monkeypatch) -> Generator[DatabaseManager, None, None]:
    """Point the configuration and the global database manager at a test database.

    Tools and resources open their own sessions through the global manager,
    so this is the fixture their tests use.
    """
    monkeypatch.setenv("LENDING_LEDGER_DATABASE_PATH", str(test_db_path))
    reset_config()
    reset_db_manager()

    manager = get_db_manager()
    manager.init_database()
    yield manager

    reset_db_manager()
    reset_config()


# === Test Data Fixtures ===


@dataclass
class SeededLibrary:
    """Identifiers of the seeded catalog."""

    rowling: int
    martin: int
    tolkien: int
    philosophers_stone: int
    game_of_thrones: int
    hobbit: int
    alice: int
    bob: int
    charlie: int


def seed_library(session: Session) -> SeededLibrary:
    """Create the sample authors, books and members."""
    authors = AuthorRepository(session)
    books = BookRepository(session)
    members = MemberRepository(session)

    rowling = authors.create(
        AuthorCreateSchema(name="J.K. Rowling", birth_date=date(1965, 7, 31), nationality="British")
    )
    martin = authors.create(
        AuthorCreateSchema(
            name="George R.R. Martin", birth_date=date(1948, 9, 20), nationality="American"
        )
    )
    tolkien = authors.create(
        AuthorCreateSchema(
            name="J.R.R. Tolkien", birth_date=date(1892, 1, 3), nationality="British"
        )
    )

    philosophers_stone = books.create(
        BookCreateSchema(
            title="Harry Potter and the Philosopher's Stone",
            author_id=rowling.id,
            genre="Fantasy",
            published_year=1997,
            total_copies=10,
        )
    )
    game_of_thrones = books.create(
        BookCreateSchema(
            title="A Game of Thrones",
            author_id=martin.id,
            genre="Fantasy",
            published_year=1996,
            total_copies=5,
        )
    )
    hobbit = books.create(
        BookCreateSchema(
            title="The Hobbit",
            author_id=tolkien.id,
            genre="Fantasy",
            published_year=1937,
            total_copies=8,
        )
    )

    alice = members.create(
        MemberCreateSchema(name="Alice Smith", email="alice@example.com", phone="123-456-7890")
    )
    bob = members.create(
        MemberCreateSchema(name="Bob Johnson", email="bob@example.com", phone="987-654-3210")
    )
    charlie = members.create(
        MemberCreateSchema(name="Charlie Brown", email="charlie@example.com", phone="456-789-1230")
    )

    return SeededLibrary(
        rowling=rowling.id,
        martin=martin.id,
        tolkien=tolkien.id,
        philosophers_stone=philosophers_stone.id,
        game_of_thrones=game_of_thrones.id,
        hobbit=hobbit.id,
        alice=alice.id,
        bob=bob.id,
        charlie=charlie.id,
    )


@pytest.fixture
def library(session: Session) -> SeededLibrary:
    """Seed the test database through the repositories."""
    return seed_library(session)


@pytest.fixture
def global_library(global_db: DatabaseManager) -> SeededLibrary:
    """Seed the database behind the global manager."""
    with global_db.session_scope() as session:
        return seed_library(session)


@pytest.fixture
def single_copy_book(session: Session, library: SeededLibrary) -> int:
    """A book with exactly one copy."""
    book = BookRepository(session).create(
        BookCreateSchema(title="The Silmarillion", author_id=library.tolkien, total_copies=1)
    )
    return book.id


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset global singletons after each test."""
    yield
    reset_db_manager()
    reset_config()
