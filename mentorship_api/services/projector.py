import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from mentorship_api.exceptions import MentorshipError
from mentorship_api.models.mentorship_connection import (
    ConnectionStatus,
    MentorshipConnection,
)
from mentorship_api.models.mentorship_request import MentorshipRequest
from mentorship_api.schemas.mentorship import (
    MentorshipConnectionRead,
    MentorshipRequestRead,
    ParticipantInfo,
    PublicProfile,
)
from mentorship_api.services.directory import ParticipantDirectory
from mentorship_api.services.validator import ParticipantRole

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

PRIVATE_CONNECTION_STATUSES = frozenset(
    {ConnectionStatus.ACTIVE, ConnectionStatus.COMPLETED, ConnectionStatus.ENDED}
)
RATEABLE_CONNECTION_STATUSES = frozenset(
    {ConnectionStatus.COMPLETED, ConnectionStatus.ENDED}
)


def build_participant_info(
    profile: PublicProfile, include_private_info: bool
) -> ParticipantInfo:
    info = ParticipantInfo(
        id=profile.id,
        display_name=profile.display_name,
        bio=profile.bio,
        profile_picture=profile.profile_picture,
        mentorship_bio=profile.mentorship_bio,
        mentorship_topics=profile.mentorship_topics,
        available_for_mentoring=profile.available_for_mentoring,
    )
    if include_private_info:
        info.full_name = profile.full_name
        info.contact_info = profile.contact_info
    return info


class ResponseProjector:
    """Turns stored requests and connections into client-safe responses."""

    def __init__(self, directory: ParticipantDirectory):
        self.directory = directory

    def request(self, request: MentorshipRequest) -> MentorshipRequestRead:
        mentee = self.directory.get_public_profile(request.mentee_id)
        mentor = self.directory.get_public_profile(request.mentor_id)
        return MentorshipRequestRead(
            id=request.id,
            mentee=build_participant_info(mentee, include_private_info=False),
            mentor=build_participant_info(mentor, include_private_info=False),
            status=request.status,
            message=request.message,
            topics=request.topics,
            created_at=request.created_at,
            updated_at=request.updated_at,
            responded_at=request.responded_at,
        )

    def connection(
        self, connection: MentorshipConnection, viewer_id: int
    ) -> MentorshipConnectionRead:
        mentee = self.directory.get_public_profile(connection.mentee_id)
        mentor = self.directory.get_public_profile(connection.mentor_id)

        status = ConnectionStatus(connection.status)
        include_private_info = status in PRIVATE_CONNECTION_STATUSES
        can_rate = status in RATEABLE_CONNECTION_STATUSES

        role = (
            ParticipantRole.MENTOR
            if connection.mentor_id == viewer_id
            else ParticipantRole.MENTEE
        )
        if role is ParticipantRole.MENTOR:
            has_rated = connection.mentor_rating is not None
        else:
            has_rated = connection.mentee_rating is not None

        return MentorshipConnectionRead(
            id=connection.id,
            request_id=connection.request_id,
            mentee=build_participant_info(mentee, include_private_info),
            mentor=build_participant_info(mentor, include_private_info),
            status=status,
            topics=connection.topics,
            started_at=connection.started_at,
            last_interaction=connection.last_interaction,
            ended_at=connection.ended_at,
            end_reason=connection.end_reason,
            can_rate=can_rate,
            has_rated=has_rated,
            created_at=connection.created_at,
            updated_at=connection.updated_at,
        )

    def requests(self, requests: Iterable[MentorshipRequest]) -> list[MentorshipRequestRead]:
        return self._project_each(requests, self.request)

    def connections(
        self, connections: Iterable[MentorshipConnection], viewer_id: int
    ) -> list[MentorshipConnectionRead]:
        return self._project_each(connections, lambda c: self.connection(c, viewer_id))

    @staticmethod
    def _project_each(items: Iterable[T], project: Callable[[T], R]) -> list[R]:
        """Project every item, leaving out the ones whose lookups fail."""
        results: list[R] = []
        for item in items:
            try:
                results.append(project(item))
            except MentorshipError as exc:
                logger.warning(
                    "Skipping %s %s in list response: %s",
                    type(item).__name__,
                    item.id,
                    exc.message,
                )
        return results
