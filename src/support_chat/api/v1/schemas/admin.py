from __future__ import annotations

from pydantic import BaseModel


class AssignSessionRequest(BaseModel):
    """``admin_id`` defaults to the calling admin."""

    admin_id: int | None = None
