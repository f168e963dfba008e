"""
Book model for the Lending Ledger.

A book carries two counters: how many physical copies the library owns and
how many of those are on the shelf right now. Only the lending ledger moves
``available_copies``; catalog updates must keep it within ``[0, total_copies]``.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Book(BaseModel):
    """
    Represents a book in the catalog.

    The copy counts satisfy ``0 <= available_copies <= total_copies``.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 3,
                "title": "The Hobbit",
                "author_id": 3,
                "genre": "Fantasy",
                "published_year": 1937,
                "total_copies": 8,
                "available_copies": 8,
            }
        },
    )

    id: int = Field(..., description="Unique identifier for the book", ge=1)

    title: str = Field(
        ...,
        description="The title of the book",
        min_length=1,
        max_length=200,
        examples=["A Game of Thrones", "The Hobbit"],
    )

    author_id: int | None = Field(
        None,
        description="Identifier of the book's author",
        ge=1,
    )

    genre: str | None = Field(
        None,
        description="Literary genre or category of the book",
        max_length=50,
        examples=["Fantasy", "Biography"],
    )

    published_year: int | None = Field(
        None,
        description="Year the book was published",
        gt=0,
        examples=[1937, 1996],
    )

    total_copies: int = Field(
        default=1,
        description="Total number of copies owned by the library",
        ge=0,
        examples=[1, 5, 10],
    )

    available_copies: int = Field(
        default=1,
        description="Number of copies currently on the shelf",
        ge=0,
        examples=[0, 1, 5],
    )

    @model_validator(mode="after")
    def validate_copies(self) -> "Book":
        """Ensure available copies never exceed total copies."""
        if self.available_copies > self.total_copies:
            raise ValueError(
                f"Available copies ({self.available_copies}) cannot exceed "
                f"total copies ({self.total_copies})"
            )
        return self

    @property
    def is_available(self) -> bool:
        return self.available_copies > 0

    @property
    def checked_out_copies(self) -> int:
        """Number of copies currently out on loan."""
        return self.total_copies - self.available_copies
