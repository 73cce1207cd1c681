from datetime import datetime

from pydantic import BaseModel


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: str
    is_active: bool
    bio: str | None
    profile_picture: str | None
    full_name: str | None
    phone: str | None
    website: str | None
    twitter: str | None
    linkedin: str | None
    is_mentor: bool
    is_mentee: bool
    available_for_mentoring: bool
    mentorship_bio: str | None
    mentorship_topics: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    name: str | None = None
    bio: str | None = None
    profile_picture: str | None = None
    full_name: str | None = None
    phone: str | None = None
    website: str | None = None
    twitter: str | None = None
    linkedin: str | None = None
    is_mentor: bool | None = None
    is_mentee: bool | None = None
    available_for_mentoring: bool | None = None
    mentorship_bio: str | None = None
    mentorship_topics: list[str] | None = None


class UserUpdate(BaseModel):
    email: str | None = None
    name: str | None = None
    role: str | None = None
    is_active: bool | None = None
