from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional

# Keys the server owns; never taken from a request body.
PROTECTED_TASK_KEYS = frozenset({"id", "ownerId", "owner_id"})


class TaskFields(BaseModel):
    """Client-visible task fields. Unknown keys are kept as-is."""

    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None  # conventionally High / Medium / Low
    due_date: Optional[str] = None  # ISO format: YYYY-MM-DD, not validated
    estimated_time: Optional[str] = None  # free-form, e.g. "2 hours"

    def to_document(self) -> dict:
        """Fields the client actually sent, keyed as on the wire."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        data.update(self.model_extra or {})
        return {k: v for k, v in data.items() if k not in PROTECTED_TASK_KEYS}


class Task(TaskFields):
    id: str
    owner_id: Optional[str] = None


class TaskCreate(TaskFields):
    pass


class TaskUpdate(TaskFields):
    pass


class User(BaseModel):
    id: str
    name: str
    email: str
    password_hash: str
    created_at: str  # ISO format datetime string


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParseRequest(_CamelModel):
    text: str
    current_date: Optional[str] = None  # YYYY-MM-DD; defaults to today (UTC)


class ImproveRequest(_CamelModel):
    title: str = ""
    description: str = ""


class ClassifyRequest(ImproveRequest):
    pass


# Shapes the completion API must return. Every key is required and must be a string.

class ParsedTask(_CamelModel):
    title: str
    description: str
    category: str
    priority: str
    due_date: str
    estimated_time: str


class ImprovedTask(_CamelModel):
    improved_title: str
    improved_description: str


class TaskClassification(_CamelModel):
    category: str
    priority: str
