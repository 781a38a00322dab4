"""Database utilities and models."""

from yearpeer.db.base import Base
from yearpeer.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
