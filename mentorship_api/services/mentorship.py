import logging

from sqlalchemy.orm import Session

from mentorship_api.config import MentorshipPolicy, settings
from mentorship_api.exceptions import (
    AlreadyRatedError,
    ConflictError,
    InvalidTransitionError,
    RequestNoLongerPendingError,
    UnauthorizedError,
)
from mentorship_api.models.mentorship_connection import (
    ConnectionStatus,
    MentorshipConnection,
)
from mentorship_api.models.mentorship_request import MentorshipRequest, RequestStatus
from mentorship_api.repositories.mentorship import MentorshipRepository
from mentorship_api.schemas.mentorship import (
    ConnectionFilters,
    EndConnection,
    MentorshipConnectionRead,
    MentorshipInsights,
    MentorshipRequestCreate,
    MentorshipRequestRead,
    MentorshipStats,
    RequestFilters,
    RespondToRequest,
    normalize_pagination,
)
from mentorship_api.services import transitions
from mentorship_api.services.directory import ParticipantDirectory
from mentorship_api.services.projector import ResponseProjector
from mentorship_api.services.validator import BusinessRuleValidator, ParticipantRole

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


def calculate_rate(total: int, part: int) -> float:
    """Percentage of ``part`` in ``total``; 0 when there is nothing to count."""
    if total == 0:
        return 0.0
    return part / total * 100.0


class MentorshipService:
    """Entry point for the mentorship request and connection lifecycle.

    Every method runs inside the caller's session; nothing is committed
    here. Status changes are applied with compare-and-set updates so a
    concurrent writer makes the losing call fail instead of overwriting.
    """

    def __init__(self, db: Session, policy: MentorshipPolicy | None = None):
        self.db = db
        self.policy = policy or settings.policy()
        self.repository = MentorshipRepository(db)
        self.directory = ParticipantDirectory(db)
        self.validator = BusinessRuleValidator(self.repository, self.directory, self.policy)
        self.projector = ResponseProjector(self.directory)

    # Requests

    def send_request(
        self, mentee_id: int, payload: MentorshipRequestCreate
    ) -> MentorshipRequestRead:
        payload.validate_fields()
        self.directory.lock_participants(mentee_id, payload.mentor_id)
        self.validator.can_initiate_request(mentee_id, payload.mentor_id)

        request = self.repository.create_request(
            mentee_id=mentee_id,
            mentor_id=payload.mentor_id,
            topics=payload.topics,
            message=payload.message,
        )
        logger.info(
            "Mentorship request %s sent from user %s to mentor %s",
            request.id,
            mentee_id,
            payload.mentor_id,
        )
        return self.projector.request(request)

    def get_request(self, request_id: int, user_id: int) -> MentorshipRequestRead:
        request = self.repository.get_request(request_id)
        self.validator.validate_access(request, user_id)
        return self.projector.request(request)

    def get_incoming_requests(
        self, mentor_id: int, limit: int = 20, offset: int = 0
    ) -> list[MentorshipRequestRead]:
        limit, offset = normalize_pagination(limit, offset)
        requests = self.repository.list_pending_requests_by_mentor(mentor_id, limit, offset)
        return self.projector.requests(requests)

    def get_outgoing_requests(
        self, mentee_id: int, limit: int = 20, offset: int = 0
    ) -> list[MentorshipRequestRead]:
        limit, offset = normalize_pagination(limit, offset)
        requests = self.repository.list_requests_by_mentee(mentee_id, limit, offset)
        return self.projector.requests(requests)

    def respond_to_request(
        self, request_id: int, mentor_id: int, payload: RespondToRequest
    ) -> MentorshipRequestRead:
        request = self.repository.get_request(request_id)
        if self.validator.role_of(request, mentor_id) is not ParticipantRole.MENTOR:
            raise UnauthorizedError()
        if request.status != RequestStatus.PENDING:
            raise RequestNoLongerPendingError()

        if payload.accept:
            self.directory.lock_participants(request.mentee_id, request.mentor_id)
            self.validator.ensure_mentor_capacity(request.mentor_id)
            # The connection goes in before the request flips, so an accepted
            # request never exists without its connection.
            connection = self.repository.create_connection(request)
            self._flip_request(request, RequestStatus.ACCEPTED)
            logger.info(
                "Mentorship request %s accepted; connection %s started",
                request.id,
                connection.id,
            )
        else:
            self._flip_request(request, RequestStatus.REJECTED)
            logger.info(
                "Mentorship request %s rejected (reason: %s)",
                request.id,
                payload.reason or "none given",
            )

        self.db.refresh(request)
        return self.projector.request(request)

    def cancel_request(self, request_id: int, user_id: int) -> MentorshipRequestRead:
        request = self.repository.get_request(request_id)
        if self.validator.role_of(request, user_id) is not ParticipantRole.MENTEE:
            raise UnauthorizedError()
        if request.status != RequestStatus.PENDING:
            raise RequestNoLongerPendingError("only pending requests can be cancelled")

        self._flip_request(request, RequestStatus.CANCELED)
        logger.info("Mentorship request %s canceled by user %s", request.id, user_id)
        self.db.refresh(request)
        return self.projector.request(request)

    def delete_request(self, request_id: int) -> None:
        """Hard-delete a request. Administrative cleanup only."""
        request = self.repository.get_request(request_id)
        if self.repository.get_connection_by_request(request.id) is not None:
            raise ConflictError("request has a connection and cannot be deleted")
        self.repository.delete_request(request_id)
        logger.info("Mentorship request %s deleted", request_id)

    def _flip_request(self, request: MentorshipRequest, target: RequestStatus) -> None:
        transitions.ensure_request_transition(request.status, target)
        changed = self.repository.transition_request(
            request.id, target, allowed_from=transitions.request_sources(target)
        )
        if not changed:
            logger.warning(
                "Request %s changed concurrently before moving to %s",
                request.id,
                target.value,
            )
            raise RequestNoLongerPendingError()

    # Connections

    def get_connection(self, connection_id: int, user_id: int) -> MentorshipConnectionRead:
        connection = self.repository.get_connection(connection_id)
        self.validator.validate_access(connection, user_id)
        return self.projector.connection(connection, user_id)

    def get_my_mentorships(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> list[MentorshipConnectionRead]:
        limit, offset = normalize_pagination(limit, offset)
        connections = self.repository.list_connections_by_mentor(user_id, limit, offset)
        return self.projector.connections(connections, user_id)

    def get_my_menteeships(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> list[MentorshipConnectionRead]:
        limit, offset = normalize_pagination(limit, offset)
        connections = self.repository.list_connections_by_mentee(user_id, limit, offset)
        return self.projector.connections(connections, user_id)

    def get_active_connections(self, user_id: int) -> list[MentorshipConnectionRead]:
        connections = self.repository.list_active_connections(user_id)
        return self.projector.connections(connections, user_id)

    def update_last_interaction(
        self, connection_id: int, user_id: int
    ) -> MentorshipConnectionRead:
        connection = self.repository.get_connection(connection_id)
        self.validator.validate_access(connection, user_id)
        live = [ConnectionStatus.ACTIVE.value, ConnectionStatus.PAUSED.value]
        if not self.repository.touch_last_interaction(connection.id, allowed_from=live):
            raise InvalidTransitionError("connection has already finished")
        self.db.refresh(connection)
        return self.projector.connection(connection, user_id)

    def pause_connection(self, connection_id: int, user_id: int) -> MentorshipConnectionRead:
        connection = self.repository.get_connection(connection_id)
        self.validator.validate_access(connection, user_id)
        if connection.status != ConnectionStatus.ACTIVE:
            raise InvalidTransitionError("only active connections can be paused")

        self._flip_connection(connection, ConnectionStatus.PAUSED)
        logger.info("Connection %s paused by user %s", connection.id, user_id)
        return self.projector.connection(connection, user_id)

    def resume_connection(self, connection_id: int, user_id: int) -> MentorshipConnectionRead:
        connection = self.repository.get_connection(connection_id)
        self.validator.validate_access(connection, user_id)
        if connection.status != ConnectionStatus.PAUSED:
            raise InvalidTransitionError("only paused connections can be resumed")

        self.directory.lock_participants(connection.mentor_id)
        self.validator.ensure_mentor_capacity(connection.mentor_id)
        self._flip_connection(connection, ConnectionStatus.ACTIVE)
        logger.info("Connection %s resumed by user %s", connection.id, user_id)
        return self.projector.connection(connection, user_id)

    def end_connection(
        self, connection_id: int, user_id: int, payload: EndConnection
    ) -> MentorshipConnectionRead:
        return self._finish_connection(
            connection_id, user_id, payload, ConnectionStatus.ENDED
        )

    def complete_connection(
        self, connection_id: int, user_id: int, payload: EndConnection
    ) -> MentorshipConnectionRead:
        return self._finish_connection(
            connection_id, user_id, payload, ConnectionStatus.COMPLETED
        )

    def _finish_connection(
        self,
        connection_id: int,
        user_id: int,
        payload: EndConnection,
        target: ConnectionStatus,
    ) -> MentorshipConnectionRead:
        payload.validate_fields()

        connection = self.repository.get_connection(connection_id)
        role = self.validator.role_of(connection, user_id)
        if transitions.is_connection_terminal(connection.status):
            raise InvalidTransitionError("connection is already ended")
        transitions.ensure_connection_transition(connection.status, target)

        ended_by_mentor = role is ParticipantRole.MENTOR
        own_rating = connection.mentor_rating if ended_by_mentor else connection.mentee_rating
        if own_rating is not None:
            raise AlreadyRatedError()

        changed = self.repository.end_connection(
            connection.id,
            target,
            allowed_from=transitions.connection_sources(target),
            end_reason=payload.reason,
            rating=payload.rating,
            feedback=payload.feedback,
            ended_by_mentor=ended_by_mentor,
        )
        if not changed:
            logger.warning("Connection %s finished concurrently", connection.id)
            raise InvalidTransitionError("connection is already ended")

        self.db.refresh(connection)
        logger.info(
            "Connection %s %s by %s %s",
            connection.id,
            target.value,
            role.value,
            user_id,
        )
        return self.projector.connection(connection, user_id)

    def _flip_connection(
        self, connection: MentorshipConnection, target: ConnectionStatus
    ) -> None:
        transitions.ensure_connection_transition(connection.status, target)
        changed = self.repository.transition_connection(
            connection.id,
            target,
            allowed_from=[connection.status],
        )
        if not changed:
            logger.warning(
                "Connection %s changed concurrently before moving to %s",
                connection.id,
                target.value,
            )
            raise InvalidTransitionError()
        self.db.refresh(connection)

    # Analytics

    def get_stats(self, user_id: int) -> MentorshipStats:
        return self.repository.get_stats(user_id)

    def get_insights(self, user_id: int) -> MentorshipInsights:
        stats = self.repository.get_stats(user_id)
        responded = stats.accepted_mentor_requests + stats.rejected_mentor_requests
        return MentorshipInsights(
            user_id=user_id,
            response_rate=calculate_rate(stats.total_mentor_requests, responded),
            connection_success_rate=calculate_rate(
                stats.total_mentee_requests, stats.accepted_mentee_requests
            ),
            active_connections_count=stats.active_mentorships + stats.active_menteeships,
            recent_requests=self.search_requests(
                user_id, RequestFilters(mentee_id=user_id, limit=RECENT_ACTIVITY_LIMIT)
            )
            + self.search_requests(
                user_id, RequestFilters(mentor_id=user_id, limit=RECENT_ACTIVITY_LIMIT)
            ),
            recent_connections=self.get_my_menteeships(user_id, RECENT_ACTIVITY_LIMIT)
            + self.get_my_mentorships(user_id, RECENT_ACTIVITY_LIMIT),
        )

    # Search

    def search_requests(
        self, user_id: int, filters: RequestFilters
    ) -> list[MentorshipRequestRead]:
        requests = self.repository.search_requests(filters.normalized())
        involved = [r for r in requests if user_id in (r.mentee_id, r.mentor_id)]
        return self.projector.requests(involved)

    def search_connections(
        self, user_id: int, filters: ConnectionFilters
    ) -> list[MentorshipConnectionRead]:
        connections = self.repository.search_connections(filters.normalized())
        involved = [c for c in connections if user_id in (c.mentee_id, c.mentor_id)]
        return self.projector.connections(involved, user_id)
