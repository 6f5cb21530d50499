"""
BaseService -- abstract base for all kernel write services.

Responsibility:
    Common constructor and session-handling contract.  Services receive a
    SQLAlchemy ``Session`` and persist with ``session.flush()`` -- never
    ``session.commit()``.  The caller (batch executor, orchestrator or test
    harness) owns commit/rollback.

Failure modes:
    SQLAlchemy errors raised inside ``_writing()`` surface as
    ``TransientStoreError`` so batch code can isolate them per project.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitephase_kernel.db.base import Base
from sitephase_kernel.exceptions import TransientStoreError

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()`` on the outer transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _writing(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            raise TransientStoreError(operation, str(exc)) from exc
