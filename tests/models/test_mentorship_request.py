from mentorship_api.models.mentorship_request import MentorshipRequest, RequestStatus


def test_create_request_defaults(db, mentee, mentor):
    request = MentorshipRequest(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        topics=["x", "career"],
    )
    db.add(request)
    db.flush()

    assert request.id is not None
    assert request.status == RequestStatus.PENDING
    assert request.message is None
    assert request.topics == ["x", "career"]
    assert request.created_at is not None
    assert request.responded_at is None


def test_request_topics_round_trip(db, mentee, mentor):
    request = MentorshipRequest(
        mentee_id=mentee.id, mentor_id=mentor.id, topics=["Time Management"]
    )
    db.add(request)
    db.flush()
    db.expire(request)

    assert request.topics == ["Time Management"]
