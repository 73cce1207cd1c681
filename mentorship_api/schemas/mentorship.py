from datetime import datetime

from pydantic import BaseModel

from mentorship_api.exceptions import (
    FeedbackTooLongError,
    InvalidMentorIDError,
    InvalidRatingError,
    MessageTooLongError,
    NoTopicsSpecifiedError,
)
from mentorship_api.models.mentorship_connection import ConnectionStatus
from mentorship_api.models.mentorship_request import RequestStatus

MAX_MESSAGE_LENGTH = 500
MAX_FEEDBACK_LENGTH = 1000
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def normalize_pagination(limit: int, offset: int) -> tuple[int, int]:
    if limit <= 0 or limit > MAX_PAGE_SIZE:
        limit = DEFAULT_PAGE_SIZE
    if offset < 0:
        offset = 0
    return limit, offset


class MentorshipRequestCreate(BaseModel):
    """Schema for a mentee asking a mentor for mentorship."""

    mentor_id: int | None = None
    message: str | None = None
    topics: list[str] = []

    def validate_fields(self) -> None:
        if self.mentor_id is None or self.mentor_id <= 0:
            raise InvalidMentorIDError()
        if not self.topics:
            raise NoTopicsSpecifiedError()
        if self.message is not None and len(self.message) > MAX_MESSAGE_LENGTH:
            raise MessageTooLongError()


class RespondToRequest(BaseModel):
    """Schema for a mentor accepting or rejecting a request."""

    accept: bool
    reason: str | None = None


class EndConnection(BaseModel):
    """Schema for ending or completing a connection.

    The rating and feedback land in the slot of whoever ends the connection.
    """

    reason: str | None = None
    rating: int | None = None
    feedback: str | None = None

    def validate_fields(self) -> None:
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise InvalidRatingError()
        if self.feedback is not None and len(self.feedback) > MAX_FEEDBACK_LENGTH:
            raise FeedbackTooLongError()


class ContactInfo(BaseModel):
    phone: str | None = None
    website: str | None = None
    twitter: str | None = None
    linkedin: str | None = None


class PublicProfile(BaseModel):
    """Everything the user directory knows about a participant."""

    id: int
    display_name: str
    is_active: bool = True
    bio: str | None = None
    profile_picture: str | None = None
    is_mentor: bool = False
    is_mentee: bool = False
    mentorship_bio: str | None = None
    mentorship_topics: list[str] = []
    available_for_mentoring: bool = False
    full_name: str | None = None
    contact_info: ContactInfo = ContactInfo()


class ParticipantInfo(BaseModel):
    """Privacy-aware view of a participant.

    ``full_name`` and ``contact_info`` stay empty unless the relationship
    allows private details.
    """

    id: int
    display_name: str
    bio: str | None = None
    profile_picture: str | None = None
    mentorship_bio: str | None = None
    mentorship_topics: list[str] = []
    available_for_mentoring: bool = False
    full_name: str | None = None
    contact_info: ContactInfo | None = None


class MentorshipRequestRead(BaseModel):
    id: int
    mentee: ParticipantInfo
    mentor: ParticipantInfo
    status: RequestStatus
    message: str | None
    topics: list[str]
    created_at: datetime
    updated_at: datetime
    responded_at: datetime | None


class MentorshipConnectionRead(BaseModel):
    id: int
    request_id: int
    mentee: ParticipantInfo
    mentor: ParticipantInfo
    status: ConnectionStatus
    topics: list[str]
    started_at: datetime
    last_interaction: datetime | None
    ended_at: datetime | None
    end_reason: str | None
    can_rate: bool
    has_rated: bool
    created_at: datetime
    updated_at: datetime


class RequestFilters(BaseModel):
    mentee_id: int | None = None
    mentor_id: int | None = None
    status: RequestStatus | None = None
    topics: list[str] = []
    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0

    def normalized(self) -> "RequestFilters":
        limit, offset = normalize_pagination(self.limit, self.offset)
        return self.model_copy(update={"limit": limit, "offset": offset})


class ConnectionFilters(BaseModel):
    mentee_id: int | None = None
    mentor_id: int | None = None
    status: ConnectionStatus | None = None
    topics: list[str] = []
    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0

    def normalized(self) -> "ConnectionFilters":
        limit, offset = normalize_pagination(self.limit, self.offset)
        return self.model_copy(update={"limit": limit, "offset": offset})


class MentorshipStats(BaseModel):
    user_id: int

    total_mentor_requests: int = 0
    accepted_mentor_requests: int = 0
    rejected_mentor_requests: int = 0
    active_mentorships: int = 0
    completed_mentorships: int = 0
    average_rating_as_mentor: float | None = None

    total_mentee_requests: int = 0
    accepted_mentee_requests: int = 0
    active_menteeships: int = 0
    completed_menteeships: int = 0
    average_rating_as_mentee: float | None = None

    total_connections: int = 0


class MentorshipInsights(BaseModel):
    user_id: int
    response_rate: float
    connection_success_rate: float
    active_connections_count: int
    recent_requests: list[MentorshipRequestRead] = []
    recent_connections: list[MentorshipConnectionRead] = []
