"""
BaseService -- abstract base for the persistence-backed kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service that reads or writes companies, approvers and workflow
    rules.  Services receive a SQLAlchemy ``Session`` and use
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (``session_scope()``, the CLI, or the test harness) owns
      commit/rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from approval_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for persistence-backed services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.
        - Public methods return frozen domain DTOs, never ORM rows.
    """

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session
