import pytest

from mentorship_api.exceptions import (
    CannotRequestSelfError,
    MaxActiveConnectionsReachedError,
    MaxPendingRequestsReachedError,
    MentorNotAvailableError,
    ParticipantNotFoundError,
    RequestAlreadyExistsError,
    UnauthorizedError,
)
from mentorship_api.models.mentorship_connection import MentorshipConnection
from mentorship_api.models.mentorship_request import MentorshipRequest
from mentorship_api.services.validator import ParticipantRole
from tests.factories import make_mentor, make_user


def test_self_request_checked_first(service, mentor):
    with pytest.raises(CannotRequestSelfError):
        service.validator.can_initiate_request(mentor.id, mentor.id)


def test_unknown_mentor(service, mentee):
    with pytest.raises(ParticipantNotFoundError):
        service.validator.can_initiate_request(mentee.id, 99999)


def test_mentor_not_flagged_as_mentor(service, mentee, outsider):
    with pytest.raises(MentorNotAvailableError):
        service.validator.can_initiate_request(mentee.id, outsider.id)


def test_mentor_not_available(service, mentee, mentor, db):
    mentor.available_for_mentoring = False
    db.flush()
    with pytest.raises(MentorNotAvailableError):
        service.validator.can_initiate_request(mentee.id, mentor.id)


def test_existing_pending_request(service, mentee, mentor, pending_request):
    with pytest.raises(RequestAlreadyExistsError):
        service.validator.can_initiate_request(mentee.id, mentor.id)


def test_rejected_request_does_not_block(service, mentee, mentor, pending_request, db):
    pending_request.status = "rejected"
    db.flush()
    service.validator.can_initiate_request(mentee.id, mentor.id)


def test_pending_cap(service, mentee, mentor, db):
    for i in range(2):
        other = make_mentor(db, f"cap{i}@test.com", f"Cap {i}")
        db.add(MentorshipRequest(mentee_id=mentee.id, mentor_id=other.id, topics=["x"]))
    db.flush()

    with pytest.raises(MaxPendingRequestsReachedError):
        service.validator.can_initiate_request(mentee.id, mentor.id)


def test_active_connection_cap(service, mentee, mentor, db):
    for i in range(2):
        other = make_user(db, f"mentee{i}@test.com", f"Mentee {i}")
        request = MentorshipRequest(
            mentee_id=other.id, mentor_id=mentor.id, topics=["x"], status="accepted"
        )
        db.add(request)
        db.flush()
        db.add(
            MentorshipConnection(
                mentee_id=other.id,
                mentor_id=mentor.id,
                request_id=request.id,
                topics=["x"],
            )
        )
    db.flush()

    with pytest.raises(MaxActiveConnectionsReachedError):
        service.validator.can_initiate_request(mentee.id, mentor.id)


def test_paused_connections_do_not_count(service, mentee, mentor, active_connection, db):
    active_connection.status = "paused"
    db.flush()
    assert service.repository.count_active_connections(mentor.id, limit=3) == 0


def test_validate_access(service, active_connection, mentee, mentor, outsider):
    service.validator.validate_access(active_connection, mentee.id)
    service.validator.validate_access(active_connection, mentor.id)
    with pytest.raises(UnauthorizedError):
        service.validator.validate_access(active_connection, outsider.id)


def test_role_of(service, pending_request, mentee, mentor, outsider):
    assert service.validator.role_of(pending_request, mentor.id) is ParticipantRole.MENTOR
    assert service.validator.role_of(pending_request, mentee.id) is ParticipantRole.MENTEE
    with pytest.raises(UnauthorizedError):
        service.validator.role_of(pending_request, outsider.id)
