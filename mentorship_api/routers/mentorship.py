from typing import Annotated

from fastapi import APIRouter, Query, status

from mentorship_api.dependencies import AdminUser, CurrentUser, Mentorship
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
)

router = APIRouter(prefix="/mentorship", tags=["mentorship"])


@router.post(
    "/requests",
    response_model=MentorshipRequestRead,
    status_code=status.HTTP_201_CREATED,
)
def send_request(
    request: MentorshipRequestCreate, user: CurrentUser, service: Mentorship
) -> MentorshipRequestRead:
    """Ask a mentor for mentorship.

    Parameters:
        request: Mentor id, topics and an optional message.
        user: The authenticated mentee.
        service: Mentorship service bound to the request's session.

    Returns:
        The pending request.

    Raises:
        400 on malformed input, 404 if the mentor does not exist, 409 when a
        business rule blocks the request.
    """
    return service.send_request(user.id, request)


@router.get("/requests/incoming", response_model=list[MentorshipRequestRead])
def get_incoming_requests(
    user: CurrentUser, service: Mentorship, limit: int = 20, offset: int = 0
) -> list[MentorshipRequestRead]:
    """List pending requests addressed to the current user.

    Parameters:
        user: The authenticated mentor.
        service: Mentorship service.
        limit: Page size; out-of-range values fall back to 20.
        offset: Rows to skip; negative values count as 0.

    Returns:
        Pending requests, newest first.
    """
    return service.get_incoming_requests(user.id, limit, offset)


@router.get("/requests/outgoing", response_model=list[MentorshipRequestRead])
def get_outgoing_requests(
    user: CurrentUser, service: Mentorship, limit: int = 20, offset: int = 0
) -> list[MentorshipRequestRead]:
    """List every request the current user has sent, in any status.

    Parameters:
        user: The authenticated mentee.
        service: Mentorship service.
        limit: Page size.
        offset: Rows to skip.

    Returns:
        Sent requests, newest first.
    """
    return service.get_outgoing_requests(user.id, limit, offset)


@router.get("/requests/search", response_model=list[MentorshipRequestRead])
def search_requests(
    filters: Annotated[RequestFilters, Query()],
    user: CurrentUser,
    service: Mentorship,
) -> list[MentorshipRequestRead]:
    """Filter requests by participant, status, topic and creation date.

    Parameters:
        filters: Query-string filters and pagination.
        user: The authenticated user.
        service: Mentorship service.

    Returns:
        Matching requests the user takes part in.
    """
    return service.search_requests(user.id, filters)


@router.get("/requests/{request_id}", response_model=MentorshipRequestRead)
def get_request(
    request_id: int, user: CurrentUser, service: Mentorship
) -> MentorshipRequestRead:
    """Fetch one request.

    Parameters:
        request_id: The request to read.
        user: The authenticated user.
        service: Mentorship service.

    Returns:
        The request with public participant details.

    Raises:
        404 if the request does not exist, 403 if the user is not a participant.
    """
    return service.get_request(request_id, user.id)


@router.post("/requests/{request_id}/respond", response_model=MentorshipRequestRead)
def respond_to_request(
    request_id: int,
    response: RespondToRequest,
    user: CurrentUser,
    service: Mentorship,
) -> MentorshipRequestRead:
    """Accept or reject a pending request as its mentor.

    Accepting starts a connection in the same transaction.

    Parameters:
        request_id: The pending request.
        response: Accept flag and optional reason.
        user: The authenticated mentor.
        service: Mentorship service.

    Returns:
        The request after the decision.

    Raises:
        403 if the user is not the mentor, 404 if the request does not exist,
        409 if it is no longer pending or the mentor is at capacity.
    """
    return service.respond_to_request(request_id, user.id, response)


@router.delete("/requests/{request_id}", response_model=MentorshipRequestRead)
def cancel_request(
    request_id: int, user: CurrentUser, service: Mentorship
) -> MentorshipRequestRead:
    """Withdraw a pending request as its mentee.

    Parameters:
        request_id: The pending request.
        user: The authenticated mentee.
        service: Mentorship service.

    Returns:
        The canceled request.

    Raises:
        403 if the user is not the mentee, 404 if the request does not exist,
        409 if it is no longer pending.
    """
    return service.cancel_request(request_id, user.id)


@router.delete(
    "/admin/requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_request(request_id: int, admin: AdminUser, service: Mentorship) -> None:
    """Hard-delete a request. Admin only.

    Parameters:
        request_id: The request to remove.
        admin: The authenticated admin.
        service: Mentorship service.

    Raises:
        403 for non-admins, 404 if the request does not exist, 409 if it
        already has a connection.
    """
    service.delete_request(request_id)


@router.get("/connections/mentor", response_model=list[MentorshipConnectionRead])
def get_my_mentorships(
    user: CurrentUser, service: Mentorship, limit: int = 20, offset: int = 0
) -> list[MentorshipConnectionRead]:
    """List connections where the current user is the mentor.

    Parameters:
        user: The authenticated user.
        service: Mentorship service.
        limit: Page size.
        offset: Rows to skip.

    Returns:
        Connections in any status, most recently started first.
    """
    return service.get_my_mentorships(user.id, limit, offset)


@router.get("/connections/mentee", response_model=list[MentorshipConnectionRead])
def get_my_menteeships(
    user: CurrentUser, service: Mentorship, limit: int = 20, offset: int = 0
) -> list[MentorshipConnectionRead]:
    """List connections where the current user is the mentee.

    Parameters:
        user: The authenticated user.
        service: Mentorship service.
        limit: Page size.
        offset: Rows to skip.

    Returns:
        Connections in any status, most recently started first.
    """
    return service.get_my_menteeships(user.id, limit, offset)


@router.get("/connections/active", response_model=list[MentorshipConnectionRead])
def get_active_connections(
    user: CurrentUser, service: Mentorship
) -> list[MentorshipConnectionRead]:
    """List the current user's active connections on either side.

    Parameters:
        user: The authenticated user.
        service: Mentorship service.

    Returns:
        Active connections with private participant details.
    """
    return service.get_active_connections(user.id)


@router.get("/connections/search", response_model=list[MentorshipConnectionRead])
def search_connections(
    filters: Annotated[ConnectionFilters, Query()],
    user: CurrentUser,
    service: Mentorship,
) -> list[MentorshipConnectionRead]:
    """Filter connections by participant, status, topic and start date.

    Parameters:
        filters: Query-string filters and pagination.
        user: The authenticated user.
        service: Mentorship service.

    Returns:
        Matching connections the user takes part in.
    """
    return service.search_connections(user.id, filters)


@router.get("/connections/{connection_id}", response_model=MentorshipConnectionRead)
def get_connection(
    connection_id: int, user: CurrentUser, service: Mentorship
) -> MentorshipConnectionRead:
    """Fetch one connection.

    Parameters:
        connection_id: The connection to read.
        user: The authenticated user.
        service: Mentorship service.

    Returns:
        The connection; contact details show unless it is paused.

    Raises:
        404 if the connection does not exist, 403 if the user is not a
        participant.
    """
    return service.get_connection(connection_id, user.id)


@router.post(
    "/connections/{connection_id}/interaction",
    response_model=MentorshipConnectionRead,
)
def update_last_interaction(
    connection_id: int, user: CurrentUser, service: Mentorship
) -> MentorshipConnectionRead:
    """Record that the participants were just in touch.

    Parameters:
        connection_id: An active or paused connection.
        user: The authenticated participant.
        service: Mentorship service.

    Returns:
        The connection with its new ``last_interaction``.

    Raises:
        403 for non-participants, 404 if missing, 409 if already finished.
    """
    return service.update_last_interaction(connection_id, user.id)


@router.post("/connections/{connection_id}/pause", response_model=MentorshipConnectionRead)
def pause_connection(
    connection_id: int, user: CurrentUser, service: Mentorship
) -> MentorshipConnectionRead:
    """Pause an active connection.

    Parameters:
        connection_id: An active connection.
        user: Either participant.
        service: Mentorship service.

    Returns:
        The paused connection.

    Raises:
        403 for non-participants, 404 if missing, 409 unless active.
    """
    return service.pause_connection(connection_id, user.id)


@router.post("/connections/{connection_id}/resume", response_model=MentorshipConnectionRead)
def resume_connection(
    connection_id: int, user: CurrentUser, service: Mentorship
) -> MentorshipConnectionRead:
    """Resume a paused connection.

    Parameters:
        connection_id: A paused connection.
        user: Either participant.
        service: Mentorship service.

    Returns:
        The active connection.

    Raises:
        403 for non-participants, 404 if missing, 409 unless paused or when
        the mentor is at capacity.
    """
    return service.resume_connection(connection_id, user.id)


@router.post("/connections/{connection_id}/end", response_model=MentorshipConnectionRead)
def end_connection(
    connection_id: int,
    request: EndConnection,
    user: CurrentUser,
    service: Mentorship,
) -> MentorshipConnectionRead:
    """End a connection, optionally leaving the caller's rating and feedback.

    Parameters:
        connection_id: An active or paused connection.
        request: Reason, rating (1-5) and feedback.
        user: Either participant.
        service: Mentorship service.

    Returns:
        The ended connection.

    Raises:
        400 for an invalid rating or feedback, 403 for non-participants,
        404 if missing, 409 if already finished or already rated.
    """
    return service.end_connection(connection_id, user.id, request)


@router.post(
    "/connections/{connection_id}/complete", response_model=MentorshipConnectionRead
)
def complete_connection(
    connection_id: int,
    request: EndConnection,
    user: CurrentUser,
    service: Mentorship,
) -> MentorshipConnectionRead:
    """Mark a connection as successfully completed.

    Same rules and errors as ending it; only the final status differs.
    """
    return service.complete_connection(connection_id, user.id, request)


@router.get("/stats", response_model=MentorshipStats)
def get_stats(user: CurrentUser, service: Mentorship) -> MentorshipStats:
    """Request and connection counts for the current user, by role."""
    return service.get_stats(user.id)


@router.get("/insights", response_model=MentorshipInsights)
def get_insights(user: CurrentUser, service: Mentorship) -> MentorshipInsights:
    """Response and success rates plus recent activity for the current user.

    Parameters:
        user: The authenticated user.
        service: Mentorship service.

    Returns:
        Rates as percentages and up to five recent items per side.
    """
    return service.get_insights(user.id)
