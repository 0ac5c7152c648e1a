from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ValidationFailed(Exception):
    """
    Raised when book input fails validation. Never reaches the database.
    """

    messages: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return "; ".join(self.messages)


@dataclass
class PersistenceFailed(Exception):
    """
    Raised by the book store when the database rejects an operation.

    kind: short error code ("db_error", "ForeignKeyConstraintError", ...)
    cause: the underlying driver exception, if any
    """

    kind: str = "db_error"
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        return f"{self.kind}: {self.cause}" if self.cause else self.kind


class ForeignKeyConstraintError(PersistenceFailed):
    """
    A book could not be deleted because comments still reference it.
    """

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(kind="ForeignKeyConstraintError", cause=cause)

    @property
    def name(self) -> str:
        return self.kind
