"""Settings request/response schemas."""

from pydantic import BaseModel


class ApiKeyUpdate(BaseModel):
    api_key: str


class ApiKeyStatus(BaseModel):
    configured: bool
    provider: str


class RestoreResponse(BaseModel):
    students: int
    lessons: int
    message: str
