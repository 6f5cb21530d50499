"""
Module: sitephase_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/ DTOs.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors never add, delete, flush or commit.
    - DTO return convention: selectors return frozen domain objects, never
      ORM instances.
    - Store failures surface as TransientStoreError, never as raw
      SQLAlchemyError.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitephase_kernel.db.base import Base
from sitephase_kernel.exceptions import TransientStoreError

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  The caller owns the session and its transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _reading(self, operation: str) -> Iterator[None]:
        """Translate SQLAlchemy failures inside the block into TransientStoreError."""
        try:
            yield
        except SQLAlchemyError as exc:
            raise TransientStoreError(operation, str(exc)) from exc
