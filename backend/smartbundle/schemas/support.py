"""
Support request schemas.
"""
from typing import Optional

from pydantic import BaseModel


class SupportRequest(BaseModel):
    # Emptiness is reported in the response body rather than as a 422
    email: str = ""
    subject: str = ""
    message: str = ""


class SupportResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
