from mentorship_api.exceptions import ParticipantNotFoundError
from mentorship_api.schemas.mentorship import ContactInfo, PublicProfile
from mentorship_api.services.projector import build_participant_info


def make_profile():
    return PublicProfile(
        id=7,
        display_name="Ada",
        bio="Engineer",
        is_mentor=True,
        mentorship_topics=["x"],
        available_for_mentoring=True,
        full_name="Ada Lovelace",
        contact_info=ContactInfo(phone="555-0101", website="ada.dev"),
    )


def test_public_projection_hides_private_fields():
    info = build_participant_info(make_profile(), include_private_info=False)

    assert info.display_name == "Ada"
    assert info.mentorship_topics == ["x"]
    assert info.available_for_mentoring is True
    assert info.full_name is None
    assert info.contact_info is None


def test_private_projection_includes_contact_details():
    info = build_participant_info(make_profile(), include_private_info=True)

    assert info.full_name == "Ada Lovelace"
    assert info.contact_info.phone == "555-0101"
    assert info.contact_info.website == "ada.dev"


def test_request_projection_is_never_private(service, pending_request):
    response = service.projector.request(pending_request)

    assert response.mentor.full_name is None
    assert response.mentee.contact_info is None


def test_paused_connection_hides_private_fields(service, active_connection, db, mentee):
    active_connection.status = "paused"
    db.flush()

    response = service.projector.connection(active_connection, mentee.id)

    assert response.mentor.full_name is None
    assert response.can_rate is False


def test_active_connection_shows_private_fields(service, active_connection, mentee):
    response = service.projector.connection(active_connection, mentee.id)

    assert response.mentor.full_name == "Mentor Fullname"
    assert response.mentor.contact_info.phone == "555-0100"
    assert response.mentee.contact_info.linkedin == "linkedin.com/in/mentee"


def test_has_rated_follows_the_viewer(service, active_connection, db, mentor, mentee):
    active_connection.status = "completed"
    active_connection.mentee_rating = 4
    db.flush()

    as_mentee = service.projector.connection(active_connection, mentee.id)
    as_mentor = service.projector.connection(active_connection, mentor.id)

    assert as_mentee.can_rate is True
    assert as_mentee.has_rated is True
    assert as_mentor.can_rate is True
    assert as_mentor.has_rated is False


def test_list_projection_skips_unresolvable_participants(
    service, active_connection, mentee, mentor, monkeypatch
):
    lookup = service.directory.get_public_profile

    def missing_mentor(user_id):
        if user_id == mentor.id:
            raise ParticipantNotFoundError()
        return lookup(user_id)

    monkeypatch.setattr(service.directory, "get_public_profile", missing_mentor)

    assert service.projector.connections([active_connection], mentee.id) == []


def test_deactivated_participant_still_projects(service, pending_request, db, mentor):
    mentor.is_active = False
    db.flush()

    response = service.projector.request(pending_request)

    assert response.mentor.id == mentor.id
    assert response.mentor.display_name == "Mentor"
