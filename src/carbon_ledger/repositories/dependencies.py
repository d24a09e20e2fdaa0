"""Dependency injection for the repository layer and the ledger facade."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.ledger import CarbonLedger
from ..db.database import get_db
from .interfaces import RepositoryContainer
from .sqlalchemy_impl import create_sqlalchemy_container


def get_repository_container(
    db: Session = Depends(get_db),
) -> RepositoryContainer:
    """
    Create a repository container with SQLAlchemy implementations.

    This is the main dependency injection point for repositories.
    """
    return create_sqlalchemy_container(db)


def get_ledger(
    repos: RepositoryContainer = Depends(get_repository_container),
) -> CarbonLedger:
    """Ledger facade over the request's session, sharing the process-wide lock."""
    return CarbonLedger.from_config(repos)
