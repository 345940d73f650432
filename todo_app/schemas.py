from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo_app.models.status import SEED_STATUSES


# Authentication
class UserRegister(BaseModel):
    username: str = Field(
        ..., min_length=3, max_length=50, description="Unique username"
    )
    password: str = Field(
        ..., min_length=6, max_length=128, description="Password (at least 6 characters)"
    )
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: str | None = Field(default=None, max_length=255)


class UserLogin(BaseModel):
    username: str = Field(..., description="Username for login")
    password: str = Field(..., description="Password for login")


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="Signed HS512 access token")
    refresh_token: str = Field(..., description="Opaque single-use refresh token")
    token_type: str = Field(default="bearer", description="Token type")


class RefreshTokenRequest(BaseModel):
    user_id: str = Field(..., description="User id as carried in the access token")
    refresh_token: str = Field(..., description="Refresh token issued at login or last refresh")


class LogoutRequest(BaseModel):
    user_id: str = Field(..., description="User id as carried in the access token")
    access_token: str = Field(..., description="Access token being discarded")


class RefreshTokenPayload(BaseModel):
    """Stored form of a user's refresh token."""

    token: str
    expiry: datetime


class UserInfo(BaseModel):
    id: int = Field(..., description="User unique identifier")
    username: str = Field(..., description="Username")
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    created_at: datetime | None = Field(None, description="Account creation timestamp")

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str = Field(..., description="Response message")


class ErrorResponse(BaseModel):
    """Body of 401 responses produced by the bearer token gate."""

    error: str
    message: str
    timestamp: datetime


# Lists
class TodoListCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")


class TodoListUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None


class TodoListResponse(BaseModel):
    id: int
    title: str
    description: str = ""
    owner_id: int
    role: str = Field(..., description="Caller's role on the list: Owner, Editor or Viewer")
    active_task_count: int | None = Field(
        None, description="Tasks on the list that are not completed"
    )


class ListRoleAssignment(BaseModel):
    role: str = Field(..., description="Editor or Viewer (case-insensitive)")


class ListRoleResponse(BaseModel):
    user_id: int
    username: str | None = None
    role: str


# Tasks
def _check_status_id(value: int | None) -> int | None:
    if value is not None and value not in SEED_STATUSES:
        raise ValueError(f"status_id must be one of {sorted(SEED_STATUSES)}")
    return value


class TodoTaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    due_date: datetime
    status_id: int = Field(default=1, description="1 Not Started, 2 In Progress, 3 Completed")
    owner_user_id: int | None = Field(
        None, description="Assignee; defaults to the creating user"
    )

    @field_validator("status_id")
    @classmethod
    def validate_status_id(cls, v):
        return _check_status_id(v)


class TodoTaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    due_date: datetime | None = None
    status_id: int | None = None
    owner_user_id: int | None = None

    @field_validator("status_id")
    @classmethod
    def validate_status_id(cls, v):
        return _check_status_id(v)


class TaskStatusUpdate(BaseModel):
    status_id: int

    @field_validator("status_id")
    @classmethod
    def validate_status_id(cls, v):
        return _check_status_id(v)


class TodoTaskResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    creation_date: datetime | None = None
    due_date: datetime
    status_id: int
    status_title: str | None = None
    owner_user_id: int
    list_id: int

    model_config = ConfigDict(from_attributes=True)


# Tags
class TagCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)


class TagResponse(BaseModel):
    id: int
    label: str
    user_id: int

    model_config = ConfigDict(from_attributes=True)


# Comments
class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1)


class CommentUpdate(BaseModel):
    text: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: int
    text: str
    task_id: int
    user_id: int
    author_username: str | None = None
