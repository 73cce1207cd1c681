from mentorship_api.models.user import User
from mentorship_api.models.mentorship_request import MentorshipRequest, RequestStatus
from mentorship_api.models.mentorship_connection import (
    ConnectionStatus,
    MentorshipConnection,
)

__all__ = [
    "User",
    "MentorshipRequest",
    "RequestStatus",
    "MentorshipConnection",
    "ConnectionStatus",
]
