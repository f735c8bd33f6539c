from __future__ import annotations

from uuid import uuid4


def new_id() -> str:
    """Opaque string id, the same shape for every stored record."""
    return uuid4().hex
