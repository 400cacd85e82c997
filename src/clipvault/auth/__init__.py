"""Identity-token checks."""

from .auth_service import AuthGuard, SubjectId

__all__ = ["AuthGuard", "SubjectId"]
