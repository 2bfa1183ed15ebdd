from __future__ import annotations

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """
    Standard error envelope.
    Every failure response from this API has this shape.
    """
    status: str = "error"
    kind: Optional[str] = None
    message: str
    detail: Optional[str] = None
