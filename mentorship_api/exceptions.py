class MentorshipError(Exception):
    """Base class for every error the mentorship engine raises."""

    message = "mentorship error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(MentorshipError):
    """Malformed input."""

    message = "invalid input"


class InvalidMentorIDError(ValidationError):
    message = "invalid mentor ID"


class NoTopicsSpecifiedError(ValidationError):
    message = "at least one topic must be specified"


class MessageTooLongError(ValidationError):
    message = "message cannot exceed 500 characters"


class InvalidRatingError(ValidationError):
    message = "rating must be between 1 and 5"


class FeedbackTooLongError(ValidationError):
    message = "feedback cannot exceed 1000 characters"


class NotFoundError(MentorshipError):
    message = "not found"


class RequestNotFoundError(NotFoundError):
    message = "mentorship request not found"


class ConnectionNotFoundError(NotFoundError):
    message = "mentorship connection not found"


class ParticipantNotFoundError(NotFoundError):
    message = "user not found"


class UnauthorizedError(MentorshipError):
    message = "unauthorized to perform this action"


class ConflictError(MentorshipError):
    """The action is well-formed but clashes with current state or policy."""

    message = "conflict"


class RequestAlreadyExistsError(ConflictError):
    message = "mentorship request already exists"


class CannotRequestSelfError(ConflictError):
    message = "cannot send mentorship request to yourself"


class MentorNotAvailableError(ConflictError):
    message = "mentor is not available for mentoring"


class MaxPendingRequestsReachedError(ConflictError):
    message = "maximum pending requests reached"


class MaxActiveConnectionsReachedError(ConflictError):
    message = "maximum active connections reached"


class InvalidTransitionError(ConflictError):
    message = "invalid status transition"


class RequestNoLongerPendingError(InvalidTransitionError):
    message = "request is no longer pending"


class AlreadyRatedError(ConflictError):
    message = "connection has already been rated"


class UpstreamError(MentorshipError):
    """A storage or directory call failed.

    The message is meant for operators; clients only see a generic
    description.
    """

    message = "upstream service failure"
