"""
Persistence layer — per-user trust score, recovery clock and override history.

SQLAlchemy-backed; SQLite by default, any SQLAlchemy URL (e.g. PostgreSQL) when configured.
"""

from backend_paypilot.database.models import (
    DEFAULT_TRUST_SCORE,
    Override,
    User,
)
from backend_paypilot.database.user_store import (
    SqlUserRepository,
    UserRepository,
    get_user_repository,
)

__all__ = [
    "DEFAULT_TRUST_SCORE",
    "Override",
    "User",
    "SqlUserRepository",
    "UserRepository",
    "get_user_repository",
]
