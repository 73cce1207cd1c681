import sqlalchemy

import pytest

from mentorship_api.models.mentorship_connection import (
    ConnectionStatus,
    MentorshipConnection,
)
from mentorship_api.models.mentorship_request import MentorshipRequest


def test_create_connection_defaults(db, mentee, mentor, pending_request):
    connection = MentorshipConnection(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        request_id=pending_request.id,
        topics=["x"],
    )
    db.add(connection)
    db.flush()

    assert connection.id is not None
    assert connection.status == ConnectionStatus.ACTIVE
    assert connection.started_at is not None
    assert connection.last_interaction is None
    assert connection.ended_at is None
    assert connection.mentor_rating is None
    assert connection.mentee_rating is None


def test_one_connection_per_request(db, mentee, mentor, active_connection):
    duplicate = MentorshipConnection(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        request_id=active_connection.request_id,
        topics=["x"],
    )
    db.add(duplicate)

    with pytest.raises(sqlalchemy.exc.IntegrityError):
        db.flush()


def test_connections_for_different_requests(db, mentee, mentor, active_connection):
    other_request = MentorshipRequest(
        mentee_id=mentee.id, mentor_id=mentor.id, topics=["career"], status="accepted"
    )
    db.add(other_request)
    db.flush()

    second = MentorshipConnection(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        request_id=other_request.id,
        topics=["career"],
    )
    db.add(second)
    db.flush()

    assert second.id != active_connection.id
