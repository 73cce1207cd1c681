"""Status machines for mentorship requests and connections.

Requests move ``pending -> accepted | rejected | canceled`` and stop there.
Connections move between ``active`` and ``paused`` until they reach
``completed`` or ``ended``.
"""

from mentorship_api.exceptions import InvalidTransitionError
from mentorship_api.models.mentorship_connection import ConnectionStatus
from mentorship_api.models.mentorship_request import RequestStatus

REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset(
        {RequestStatus.ACCEPTED, RequestStatus.REJECTED, RequestStatus.CANCELED}
    ),
    RequestStatus.ACCEPTED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELED: frozenset(),
}

CONNECTION_TRANSITIONS: dict[ConnectionStatus, frozenset[ConnectionStatus]] = {
    ConnectionStatus.ACTIVE: frozenset(
        {ConnectionStatus.PAUSED, ConnectionStatus.COMPLETED, ConnectionStatus.ENDED}
    ),
    ConnectionStatus.PAUSED: frozenset(
        {ConnectionStatus.ACTIVE, ConnectionStatus.COMPLETED, ConnectionStatus.ENDED}
    ),
    ConnectionStatus.COMPLETED: frozenset(),
    ConnectionStatus.ENDED: frozenset(),
}


def can_transition_request(current: str, target: str) -> bool:
    try:
        return RequestStatus(target) in REQUEST_TRANSITIONS[RequestStatus(current)]
    except ValueError:
        return False


def can_transition_connection(current: str, target: str) -> bool:
    try:
        return ConnectionStatus(target) in CONNECTION_TRANSITIONS[ConnectionStatus(current)]
    except ValueError:
        return False


def request_sources(target: RequestStatus) -> list[str]:
    """Statuses a request may hold immediately before moving to ``target``."""
    return [s.value for s, allowed in REQUEST_TRANSITIONS.items() if target in allowed]


def connection_sources(target: ConnectionStatus) -> list[str]:
    """Statuses a connection may hold immediately before moving to ``target``."""
    return [s.value for s, allowed in CONNECTION_TRANSITIONS.items() if target in allowed]


def is_request_terminal(status: str) -> bool:
    return not REQUEST_TRANSITIONS[RequestStatus(status)]


def is_connection_terminal(status: str) -> bool:
    return not CONNECTION_TRANSITIONS[ConnectionStatus(status)]


def ensure_request_transition(current: str, target: RequestStatus) -> None:
    if not can_transition_request(current, target):
        raise InvalidTransitionError(
            f"cannot move request from {current} to {target.value}"
        )


def ensure_connection_transition(current: str, target: ConnectionStatus) -> None:
    if not can_transition_connection(current, target):
        raise InvalidTransitionError(
            f"cannot move connection from {current} to {target.value}"
        )
