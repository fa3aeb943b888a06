from typing import Optional
from pydantic import BaseModel, field_validator


class UploadRequest(BaseModel):
    video_url: str
    caption: Optional[str] = None

    @field_validator("video_url")
    @classmethod
    def video_url_must_be_http(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("video_url must be an http(s) URL")
        return value


class UploadResponse(BaseModel):
    status: str
    message: str


class UploadErrorResponse(BaseModel):
    status: str = "error"
    message: str
    error_kind: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    region: str
    kdf_mode: str
