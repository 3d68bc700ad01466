"""Document schemas."""

import copy

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Dict, Optional

from ..services.content_utils import EMPTY_DOCUMENT, is_valid_tiptap_content


def _validate_tiptap(v: Any) -> Any:
    if not is_valid_tiptap_content(v):
        raise ValueError("content must be a Tiptap document: {\"type\": \"doc\", \"content\": [...]}")
    return v


class DocumentCreate(BaseModel):
    """Schema for creating a document."""
    owner_id: str = Field(min_length=1)
    title: str = ""
    content: Dict[str, Any] = Field(default_factory=lambda: copy.deepcopy(EMPTY_DOCUMENT))

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return _validate_tiptap(v)

    @field_validator('title')
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()


class ContentUpdate(BaseModel):
    """One save from the editor, with the editor's telemetry for this save."""
    content: Dict[str, Any]
    trigger: str = Field(default="autosave", min_length=1, max_length=50, description="autosave or blur")
    paste_word_count: Optional[int] = Field(default=None, ge=0)
    keystroke_count: Optional[int] = Field(default=None, ge=0)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return _validate_tiptap(v)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "content": {
                        "type": "doc",
                        "content": [
                            {"type": "paragraph", "content": [{"type": "text", "text": "My essay"}]}
                        ],
                    },
                    "trigger": "autosave",
                    "paste_word_count": 0,
                    "keystroke_count": 14,
                }
            ]
        }
    }


class SubmitRequest(BaseModel):
    """Optional final content sent together with a submission."""
    content: Optional[Dict[str, Any]] = None

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return None if v is None else _validate_tiptap(v)


class RestoreRequest(BaseModel):
    """Schema for restoring a document to a history entry."""
    history_id: int


class DocumentResponse(BaseModel):
    """Schema for document response."""
    id: str
    owner_id: str
    title: str
    content: Dict[str, Any]
    is_submitted: bool
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
