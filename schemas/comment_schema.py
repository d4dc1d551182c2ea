from datetime import datetime
from typing import List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from utils.timeutils import to_naive_utc

Platform = Literal["News", "Twitter", "Facebook", "YouTube", "Knesset", "Interview", "Other"]
SourceType = Literal["Primary", "Secondary"]


def _check_http_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid URL format")
    return value


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    faction: Optional[str] = Field(None, max_length=200)


class SubjectOut(BaseModel):
    id: int
    name: str
    faction: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class CommentCreate(BaseModel):
    subject_id: int = Field(..., gt=0)
    content: str = Field(..., min_length=10, max_length=5000)
    source_url: str = Field(..., max_length=2000)
    source_platform: Platform
    source_type: SourceType
    source_name: Optional[str] = Field(None, max_length=200)
    source_credibility: Optional[int] = Field(None, ge=1, le=10)
    comment_date: datetime
    keywords: Optional[List[str]] = None
    image_url: Optional[str] = Field(None, max_length=2000)
    video_url: Optional[str] = Field(None, max_length=2000)
    additional_context: Optional[str] = Field(None, max_length=1000)

    @field_validator("source_url", "image_url", "video_url")
    @classmethod
    def validate_url(cls, v):
        return _check_http_url(v)

    @field_validator("comment_date")
    @classmethod
    def store_as_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class DuplicateCheckRequest(BaseModel):
    subject_id: int = Field(..., gt=0)
    content: str = Field(..., min_length=1, max_length=5000)
    source_url: Optional[str] = None


class SimilarComment(BaseModel):
    id: int
    similarity: float
    content: str


class DuplicateCheck(BaseModel):
    is_duplicate: bool
    duplicate_of: Optional[int] = None
    duplicate_group: Optional[str] = None
    similar_comments: List[SimilarComment] = []


class DuplicateRef(BaseModel):
    id: int
    source_url: str
    source_platform: str
    source_name: Optional[str] = None
    published_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class PrimaryRef(BaseModel):
    id: int
    content: str
    source_url: str
    source_platform: str
    source_name: Optional[str] = None
    comment_date: datetime

    model_config = {
        "from_attributes": True
    }


class CommentOut(BaseModel):
    id: int
    subject_id: int
    content: str
    source_url: str
    source_platform: str
    source_type: str
    source_name: Optional[str] = None
    source_credibility: int
    comment_date: datetime
    published_at: Optional[datetime] = None
    keywords: List[str] = []
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    additional_context: Optional[str] = None
    is_verified: bool
    duplicate_of: Optional[int] = None
    duplicate_group: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class CommentCreated(CommentOut):
    is_duplicate: bool


class PrimaryCommentOut(CommentOut):
    duplicates: List[DuplicateRef] = []


class CommentDetailOut(PrimaryCommentOut):
    primary_comment: Optional[PrimaryRef] = None


class VerifyRequest(BaseModel):
    verified: bool


class BulkVerifyRequest(BaseModel):
    comment_ids: List[int] = Field(..., min_length=1)
    verified: bool


class BulkDeleteRequest(BaseModel):
    comment_ids: List[int] = Field(..., min_length=1)
