"""Domain layer for shopledger application.

Services live in their own modules (``shopledger.domain.debt``,
``shopledger.domain.journal``, ``shopledger.domain.report``) and are not
re-exported here, because the database layer imports the entities through
this package.
"""

from shopledger.domain.errors import (
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "InvalidStateError",
    "NotFoundError",
    "ValidationError",
]
