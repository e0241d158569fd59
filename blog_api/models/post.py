"""Post request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 10000


class PostInput(BaseModel):
    """Body for both create and update; updates always replace title and content."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)


class Post(BaseModel):
    """A stored post as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    content_html: str
    created_at: datetime
    updated_at: datetime


class PostResponse(BaseModel):
    success: bool = True
    data: Post
    message: str | None = None


class PostListResponse(BaseModel):
    success: bool = True
    data: list[Post]
    count: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
