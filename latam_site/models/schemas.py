#  Latam Site - Pydantic Schemas
#
#  Request/response models for the REST API. Wire field names follow the
#  site's Spanish form markup.
#
#  Depends on: (none)
#  Used by:    routes/*

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class BannerOut(BaseModel):
    message: str
    status: str
    version: str
    endpoints: dict[str, str]


class HealthOut(BaseModel):
    status: str
    message: str
    timestamp: str


class CsrfTokenOut(BaseModel):
    csrfToken: str


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

class ContactRequest(BaseModel):
    # Presence and shape are checked by the contact handler so every failure
    # maps to the same 400 body; these bounds only cap payload size.
    nombre: str | None = Field(default=None, max_length=1000)
    empresa: str | None = Field(default=None, max_length=1000)
    email: str | None = Field(default=None, max_length=1000)
    telefono: str | None = Field(default=None, max_length=1000)
    mensaje: str | None = Field(default=None, max_length=20_000)


class ContactOut(BaseModel):
    success: bool
    message: str


# ---------------------------------------------------------------------------
# AI chat
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    prompt: str | None = None


class ChatOut(BaseModel):
    result: str
