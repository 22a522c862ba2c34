"""API-facing Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    message: str


class OutboundCallRequest(BaseModel):
    to_number: str = Field(description="E.164 phone number, e.g. +1917...")
    from_number: str | None = Field(default=None, description="Defaults to TWILIO_FROM_NUMBER.")


class OutboundCallResponse(BaseModel):
    call_sid: str
    to_number: str
