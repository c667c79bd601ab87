"""
Viewer model: who is asking (SubjectIdentity) and what we know about them (ViewerContext).

Subject identity precedence: an authenticated user id always wins over the
anonymous session id. Assignment lookups and click de-duplication key on
subject_key, which is "user:<id>" when a user id is present and
"session:<sid>" otherwise.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator


class SubjectScope(str, Enum):
    USER = "user"
    SESSION = "session"


class SubjectIdentity(BaseModel):
    """Opaque subject identity resolved upstream (auth is not handled here)."""

    user_id: Optional[str] = None
    session_id: Optional[str] = None

    @field_validator("user_id", "session_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @model_validator(mode="after")
    def requires_some_identity(self):
        if not self.user_id and not self.session_id:
            raise ValueError("SubjectIdentity needs a user_id or a session_id")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def scope(self) -> SubjectScope:
        return SubjectScope.USER if self.is_authenticated else SubjectScope.SESSION

    @property
    def scoped_id(self) -> str:
        return self.user_id if self.is_authenticated else self.session_id

    @property
    def subject_key(self) -> str:
        return f"{self.scope.value}:{self.scoped_id}"


class ViewerContext(BaseModel):
    """Per-request viewer signals used by the scoring engine."""

    subject: Optional[SubjectIdentity] = None
    favorited_categories: List[str] = []
    home_region: Optional[str] = None
    excluded_item_ids: List[str] = []

    @field_validator("excluded_item_ids", mode="before")
    @classmethod
    def _coerce_ids(cls, v):
        if v is None:
            return []
        return [str(x).strip() for x in v if x is not None and str(x).strip()]

    @field_validator("favorited_categories", mode="before")
    @classmethod
    def _drop_blank_categories(cls, v):
        if v is None:
            return []
        return [str(c) for c in v if c is not None and str(c) != ""]

    @property
    def is_authenticated(self) -> bool:
        return self.subject is not None and self.subject.is_authenticated
