import enum

from mentorship_api.config import MentorshipPolicy
from mentorship_api.exceptions import (
    CannotRequestSelfError,
    MaxActiveConnectionsReachedError,
    MaxPendingRequestsReachedError,
    MentorNotAvailableError,
    RequestAlreadyExistsError,
    UnauthorizedError,
)
from mentorship_api.models.mentorship_connection import MentorshipConnection
from mentorship_api.models.mentorship_request import MentorshipRequest
from mentorship_api.repositories.mentorship import MentorshipRepository
from mentorship_api.services.directory import ParticipantDirectory

Participated = MentorshipRequest | MentorshipConnection


class ParticipantRole(str, enum.Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"


class BusinessRuleValidator:
    """Pre-flight checks for request creation and participant access.

    Every check costs at most one bounded query.
    """

    def __init__(
        self,
        repository: MentorshipRepository,
        directory: ParticipantDirectory,
        policy: MentorshipPolicy,
    ):
        self.repository = repository
        self.directory = directory
        self.policy = policy

    def can_initiate_request(self, mentee_id: int, mentor_id: int) -> None:
        """Raise the first rule a new request from mentee to mentor breaks.

        Raises:
            CannotRequestSelfError: mentee and mentor are the same user.
            ParticipantNotFoundError: the mentor does not exist.
            MentorNotAvailableError: the mentor is not taking mentees.
            RequestAlreadyExistsError: a pending request already links the pair.
            MaxPendingRequestsReachedError: the mentee is at the pending cap.
            MaxActiveConnectionsReachedError: the mentor is at the active cap.
        """
        if mentee_id == mentor_id:
            raise CannotRequestSelfError()

        if not self.directory.is_available_as_mentor(mentor_id):
            raise MentorNotAvailableError()

        if self.repository.exists_pending_request(mentee_id, mentor_id):
            raise RequestAlreadyExistsError()

        cap = self.policy.max_pending_requests
        if self.repository.count_pending_requests(mentee_id, limit=cap + 1) >= cap:
            raise MaxPendingRequestsReachedError()

        self.ensure_mentor_capacity(mentor_id)

    def ensure_mentor_capacity(self, mentor_id: int) -> None:
        cap = self.policy.max_active_connections
        if self.repository.count_active_connections(mentor_id, limit=cap + 1) >= cap:
            raise MaxActiveConnectionsReachedError()

    def validate_access(self, entity: Participated, actor_id: int) -> None:
        if actor_id not in (entity.mentee_id, entity.mentor_id):
            raise UnauthorizedError()

    def role_of(self, entity: Participated, actor_id: int) -> ParticipantRole:
        self.validate_access(entity, actor_id)
        if entity.mentor_id == actor_id:
            return ParticipantRole.MENTOR
        return ParticipantRole.MENTEE
