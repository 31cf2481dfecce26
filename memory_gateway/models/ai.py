"""
ai.py — Pydantic models for the /api/ai/invoke endpoint.
"""

from typing import Optional

from pydantic import BaseModel


class InvokeRequest(BaseModel):
    # Both optional so a missing field is reported as MissingParameter (400)
    # with the gateway's {"error": ...} body rather than a 422.
    model: Optional[str] = None
    prompt: Optional[str] = None


class InvokeResponse(BaseModel):
    response: str
