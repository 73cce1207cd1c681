import pytest

from mentorship_api.exceptions import InvalidTransitionError
from mentorship_api.models.mentorship_connection import ConnectionStatus
from mentorship_api.models.mentorship_request import RequestStatus
from mentorship_api.services import transitions


@pytest.mark.parametrize("target", ["accepted", "rejected", "canceled"])
def test_pending_request_can_reach_every_terminal_status(target):
    assert transitions.can_transition_request("pending", target) is True


@pytest.mark.parametrize("current", ["accepted", "rejected", "canceled"])
@pytest.mark.parametrize("target", ["pending", "accepted", "rejected", "canceled"])
def test_terminal_request_statuses_are_final(current, target):
    assert transitions.can_transition_request(current, target) is False
    assert transitions.is_request_terminal(current) is True


def test_unknown_request_status_is_rejected():
    assert transitions.can_transition_request("pending", "archived") is False


def test_ensure_request_transition_raises():
    with pytest.raises(InvalidTransitionError):
        transitions.ensure_request_transition("rejected", RequestStatus.ACCEPTED)


def test_connection_pause_and_resume_edges():
    assert transitions.can_transition_connection("active", "paused") is True
    assert transitions.can_transition_connection("paused", "active") is True
    assert transitions.can_transition_connection("paused", "paused") is False
    assert transitions.can_transition_connection("active", "active") is False


@pytest.mark.parametrize("current", ["active", "paused"])
@pytest.mark.parametrize("target", ["completed", "ended"])
def test_live_connections_can_finish(current, target):
    assert transitions.can_transition_connection(current, target) is True


@pytest.mark.parametrize("current", ["completed", "ended"])
def test_finished_connections_are_final(current):
    for target in ConnectionStatus:
        assert transitions.can_transition_connection(current, target.value) is False
    with pytest.raises(InvalidTransitionError):
        transitions.ensure_connection_transition(current, ConnectionStatus.ACTIVE)


def test_transition_sources():
    assert transitions.request_sources(RequestStatus.CANCELED) == ["pending"]
    assert sorted(transitions.connection_sources(ConnectionStatus.ENDED)) == [
        "active",
        "paused",
    ]
    assert transitions.connection_sources(ConnectionStatus.PAUSED) == ["active"]
