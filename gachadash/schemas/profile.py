"""Request bodies for profile tag and comment endpoints."""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator


class TagCreate(BaseModel):
    tag: str = Field(..., min_length=1, max_length=64)
    author: str = Field("Admin", min_length=1, max_length=64)

    @field_validator("tag")
    @classmethod
    def tag_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Tag cannot be empty")
        return v


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=2000)
    author: str = Field("Admin", min_length=1, max_length=64)

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comment cannot be empty")
        return v


class ProfileUpdate(BaseModel):
    updates: Dict[str, Any] = Field(default_factory=dict)
    author: str = "Admin"
