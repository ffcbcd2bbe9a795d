"""
Shared column helpers.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC now, used as a Python-side column default."""
    return datetime.now(timezone.utc)
