"""Error envelope returned for every rejected request."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    field: Optional[str] = None
    limit: Optional[int] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
    request_id: str
