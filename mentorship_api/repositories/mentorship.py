import functools
import json
import logging

from sqlalchemy import String, cast, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from mentorship_api.exceptions import (
    ConflictError,
    ConnectionNotFoundError,
    RequestNotFoundError,
    UpstreamError,
)
from mentorship_api.models.mentorship_connection import (
    ConnectionStatus,
    MentorshipConnection,
)
from mentorship_api.models.mentorship_request import MentorshipRequest, RequestStatus
from mentorship_api.schemas.mentorship import (
    ConnectionFilters,
    MentorshipStats,
    RequestFilters,
)

logger = logging.getLogger(__name__)

FINISHED_CONNECTION_STATUSES = [
    ConnectionStatus.COMPLETED.value,
    ConnectionStatus.ENDED.value,
]


def _upstream(method):
    """Re-raise database failures as UpstreamError with the operation name."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("Mentorship store call %s failed", method.__name__, exc_info=True)
            raise UpstreamError(f"mentorship store call {method.__name__} failed") from exc

    return wrapper


def _topic_match(column, topics: list[str]):
    # Topics are stored as a JSON array; match any element as the JSON type
    # serializes it, so escaped characters line up with the stored text.
    return or_(
        *[cast(column, String).contains(json.dumps(topic), autoescape=True) for topic in topics]
    )


class MentorshipRepository:
    """SQLAlchemy store for mentorship requests and connections.

    Status updates are compare-and-set: they only apply when the row still
    holds one of the expected statuses, and report whether a row changed.
    """

    def __init__(self, db: Session):
        self.db = db

    # Requests

    @_upstream
    def create_request(
        self, mentee_id: int, mentor_id: int, topics: list[str], message: str | None
    ) -> MentorshipRequest:
        request = MentorshipRequest(
            mentee_id=mentee_id,
            mentor_id=mentor_id,
            status=RequestStatus.PENDING.value,
            topics=list(topics),
            message=message,
        )
        self.db.add(request)
        self.db.flush()
        self.db.refresh(request)
        return request

    @_upstream
    def get_request(self, request_id: int) -> MentorshipRequest:
        request: MentorshipRequest | None = self.db.get(MentorshipRequest, request_id)
        if request is None:
            raise RequestNotFoundError()
        return request

    @_upstream
    def list_requests_by_mentee(
        self, mentee_id: int, limit: int, offset: int
    ) -> list[MentorshipRequest]:
        return self._page_requests(
            MentorshipRequest.mentee_id == mentee_id, limit=limit, offset=offset
        )

    @_upstream
    def list_requests_by_mentor(
        self, mentor_id: int, limit: int, offset: int
    ) -> list[MentorshipRequest]:
        return self._page_requests(
            MentorshipRequest.mentor_id == mentor_id, limit=limit, offset=offset
        )

    @_upstream
    def list_pending_requests_by_mentor(
        self, mentor_id: int, limit: int, offset: int
    ) -> list[MentorshipRequest]:
        return self._page_requests(
            MentorshipRequest.mentor_id == mentor_id,
            MentorshipRequest.status == RequestStatus.PENDING.value,
            limit=limit,
            offset=offset,
        )

    @_upstream
    def exists_pending_request(self, mentee_id: int, mentor_id: int) -> bool:
        found = self.db.execute(
            select(MentorshipRequest.id)
            .where(
                MentorshipRequest.mentee_id == mentee_id,
                MentorshipRequest.mentor_id == mentor_id,
                MentorshipRequest.status == RequestStatus.PENDING.value,
            )
            .limit(1)
        ).scalar_one_or_none()
        return found is not None

    @_upstream
    def count_pending_requests(self, mentee_id: int, limit: int) -> int:
        """Count the mentee's pending requests, reading at most ``limit`` rows."""
        rows = (
            select(MentorshipRequest.id)
            .where(
                MentorshipRequest.mentee_id == mentee_id,
                MentorshipRequest.status == RequestStatus.PENDING.value,
            )
            .limit(limit)
            .subquery()
        )
        return self.db.execute(select(func.count()).select_from(rows)).scalar_one()

    @_upstream
    def transition_request(
        self, request_id: int, target: RequestStatus, allowed_from: list[str]
    ) -> bool:
        result = self.db.execute(
            update(MentorshipRequest)
            .where(
                MentorshipRequest.id == request_id,
                MentorshipRequest.status.in_(allowed_from),
            )
            .values(
                status=target.value, updated_at=func.now(), responded_at=func.now()
            )
        )
        return result.rowcount == 1

    @_upstream
    def delete_request(self, request_id: int) -> None:
        result = self.db.execute(
            delete(MentorshipRequest).where(MentorshipRequest.id == request_id)
        )
        if result.rowcount == 0:
            raise RequestNotFoundError()

    @_upstream
    def search_requests(self, filters: RequestFilters) -> list[MentorshipRequest]:
        clauses = []
        if filters.mentee_id is not None:
            clauses.append(MentorshipRequest.mentee_id == filters.mentee_id)
        if filters.mentor_id is not None:
            clauses.append(MentorshipRequest.mentor_id == filters.mentor_id)
        if filters.status is not None:
            clauses.append(MentorshipRequest.status == filters.status.value)
        if filters.topics:
            clauses.append(_topic_match(MentorshipRequest.topics, filters.topics))
        if filters.date_from is not None:
            clauses.append(MentorshipRequest.created_at >= filters.date_from)
        if filters.date_to is not None:
            clauses.append(MentorshipRequest.created_at <= filters.date_to)
        return self._page_requests(*clauses, limit=filters.limit, offset=filters.offset)

    def _page_requests(self, *clauses, limit: int, offset: int) -> list[MentorshipRequest]:
        return list(
            self.db.execute(
                select(MentorshipRequest)
                .where(*clauses)
                .order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc())
                .limit(limit)
                .offset(offset)
            ).scalars().all()
        )

    # Connections

    @_upstream
    def create_connection(self, request: MentorshipRequest) -> MentorshipConnection:
        """Create the connection for an accepted request.

        Safe to call again for the same request: an existing connection is
        returned instead of inserting a second one.
        """
        existing = self.get_connection_by_request(request.id)
        if existing is not None:
            return existing
        connection = MentorshipConnection(
            mentee_id=request.mentee_id,
            mentor_id=request.mentor_id,
            request_id=request.id,
            status=ConnectionStatus.ACTIVE.value,
            topics=list(request.topics),
        )
        self.db.add(connection)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "a connection for this request is already being created"
            ) from exc
        self.db.refresh(connection)
        return connection

    @_upstream
    def get_connection(self, connection_id: int) -> MentorshipConnection:
        connection: MentorshipConnection | None = self.db.get(
            MentorshipConnection, connection_id
        )
        if connection is None:
            raise ConnectionNotFoundError()
        return connection

    @_upstream
    def get_connection_by_request(self, request_id: int) -> MentorshipConnection | None:
        return self.db.execute(
            select(MentorshipConnection).where(
                MentorshipConnection.request_id == request_id
            )
        ).scalar_one_or_none()

    @_upstream
    def list_connections_by_mentee(
        self, mentee_id: int, limit: int, offset: int
    ) -> list[MentorshipConnection]:
        return self._page_connections(
            MentorshipConnection.mentee_id == mentee_id, limit=limit, offset=offset
        )

    @_upstream
    def list_connections_by_mentor(
        self, mentor_id: int, limit: int, offset: int
    ) -> list[MentorshipConnection]:
        return self._page_connections(
            MentorshipConnection.mentor_id == mentor_id, limit=limit, offset=offset
        )

    @_upstream
    def list_active_connections(self, user_id: int) -> list[MentorshipConnection]:
        return list(
            self.db.execute(
                select(MentorshipConnection)
                .where(
                    MentorshipConnection.status == ConnectionStatus.ACTIVE.value,
                    or_(
                        MentorshipConnection.mentee_id == user_id,
                        MentorshipConnection.mentor_id == user_id,
                    ),
                )
                .order_by(MentorshipConnection.started_at.desc(), MentorshipConnection.id.desc())
            ).scalars().all()
        )

    @_upstream
    def count_active_connections(self, user_id: int, limit: int) -> int:
        """Count active connections on either side, reading at most ``limit`` rows."""
        rows = (
            select(MentorshipConnection.id)
            .where(
                MentorshipConnection.status == ConnectionStatus.ACTIVE.value,
                or_(
                    MentorshipConnection.mentee_id == user_id,
                    MentorshipConnection.mentor_id == user_id,
                ),
            )
            .limit(limit)
            .subquery()
        )
        return self.db.execute(select(func.count()).select_from(rows)).scalar_one()

    @_upstream
    def transition_connection(
        self, connection_id: int, target: ConnectionStatus, allowed_from: list[str]
    ) -> bool:
        result = self.db.execute(
            update(MentorshipConnection)
            .where(
                MentorshipConnection.id == connection_id,
                MentorshipConnection.status.in_(allowed_from),
            )
            .values(status=target.value, updated_at=func.now())
        )
        return result.rowcount == 1

    @_upstream
    def touch_last_interaction(self, connection_id: int, allowed_from: list[str]) -> bool:
        result = self.db.execute(
            update(MentorshipConnection)
            .where(
                MentorshipConnection.id == connection_id,
                MentorshipConnection.status.in_(allowed_from),
            )
            .values(last_interaction=func.now(), updated_at=func.now())
        )
        return result.rowcount == 1

    @_upstream
    def end_connection(
        self,
        connection_id: int,
        target: ConnectionStatus,
        allowed_from: list[str],
        end_reason: str | None,
        rating: int | None,
        feedback: str | None,
        ended_by_mentor: bool,
    ) -> bool:
        """Move a connection into a finished status with its end metadata.

        Only the ending party's rating/feedback slot is written, and only
        while that slot is still empty.
        """
        values = {
            "status": target.value,
            "ended_at": func.now(),
            "end_reason": end_reason,
            "updated_at": func.now(),
        }
        if ended_by_mentor:
            rating_column = MentorshipConnection.mentor_rating
            values.update(mentor_rating=rating, mentor_feedback=feedback)
        else:
            rating_column = MentorshipConnection.mentee_rating
            values.update(mentee_rating=rating, mentee_feedback=feedback)
        result = self.db.execute(
            update(MentorshipConnection)
            .where(
                MentorshipConnection.id == connection_id,
                MentorshipConnection.status.in_(allowed_from),
                rating_column.is_(None),
            )
            .values(**values)
        )
        return result.rowcount == 1

    @_upstream
    def search_connections(self, filters: ConnectionFilters) -> list[MentorshipConnection]:
        clauses = []
        if filters.mentee_id is not None:
            clauses.append(MentorshipConnection.mentee_id == filters.mentee_id)
        if filters.mentor_id is not None:
            clauses.append(MentorshipConnection.mentor_id == filters.mentor_id)
        if filters.status is not None:
            clauses.append(MentorshipConnection.status == filters.status.value)
        if filters.topics:
            clauses.append(_topic_match(MentorshipConnection.topics, filters.topics))
        if filters.date_from is not None:
            clauses.append(MentorshipConnection.started_at >= filters.date_from)
        if filters.date_to is not None:
            clauses.append(MentorshipConnection.started_at <= filters.date_to)
        return self._page_connections(*clauses, limit=filters.limit, offset=filters.offset)

    def _page_connections(
        self, *clauses, limit: int, offset: int
    ) -> list[MentorshipConnection]:
        return list(
            self.db.execute(
                select(MentorshipConnection)
                .where(*clauses)
                .order_by(MentorshipConnection.started_at.desc(), MentorshipConnection.id.desc())
                .limit(limit)
                .offset(offset)
            ).scalars().all()
        )

    # Analytics

    @_upstream
    def get_stats(self, user_id: int) -> MentorshipStats:
        def count_requests(*clauses) -> int:
            return self.db.execute(
                select(func.count(MentorshipRequest.id)).where(*clauses)
            ).scalar_one()

        def count_connections(*clauses) -> int:
            return self.db.execute(
                select(func.count(MentorshipConnection.id)).where(*clauses)
            ).scalar_one()

        def average(column, *clauses) -> float | None:
            value = self.db.execute(
                select(func.avg(column)).where(column.is_not(None), *clauses)
            ).scalar_one()
            return float(value) if value is not None else None

        as_mentor = MentorshipRequest.mentor_id == user_id
        as_mentee = MentorshipRequest.mentee_id == user_id
        mentoring = MentorshipConnection.mentor_id == user_id
        mentored = MentorshipConnection.mentee_id == user_id
        active = MentorshipConnection.status == ConnectionStatus.ACTIVE.value
        finished = MentorshipConnection.status.in_(FINISHED_CONNECTION_STATUSES)

        stats = MentorshipStats(
            user_id=user_id,
            total_mentor_requests=count_requests(as_mentor),
            accepted_mentor_requests=count_requests(
                as_mentor, MentorshipRequest.status == RequestStatus.ACCEPTED.value
            ),
            rejected_mentor_requests=count_requests(
                as_mentor, MentorshipRequest.status == RequestStatus.REJECTED.value
            ),
            active_mentorships=count_connections(mentoring, active),
            completed_mentorships=count_connections(mentoring, finished),
            # Ratings a mentor receives are the ones their mentees wrote.
            average_rating_as_mentor=average(MentorshipConnection.mentee_rating, mentoring),
            total_mentee_requests=count_requests(as_mentee),
            accepted_mentee_requests=count_requests(
                as_mentee, MentorshipRequest.status == RequestStatus.ACCEPTED.value
            ),
            active_menteeships=count_connections(mentored, active),
            completed_menteeships=count_connections(mentored, finished),
            average_rating_as_mentee=average(MentorshipConnection.mentor_rating, mentored),
        )
        stats.total_connections = count_connections(or_(mentoring, mentored))
        return stats
