from typing import Literal

from pydantic import BaseModel


class SessionCreateResponse(BaseModel):
    session_id: str


class SessionDeleteResponse(BaseModel):
    deleted: bool


class InstructionRequest(BaseModel):
    instruction: str


class SessionStateResponse(BaseModel):
    session_id: str
    status: Literal["idle", "busy", "success", "failed"]
    instruction: str
    source_name: str | None = None
    source_mime_type: str | None = None
    source_data_url: str | None = None
    result: str | None = None
    error: str | None = None
    can_generate: bool
    can_download: bool
    accepted_mime_types: list[str]
