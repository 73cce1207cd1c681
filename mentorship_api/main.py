import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mentorship_api.config import settings
from mentorship_api.database import engine
from mentorship_api.exceptions import (
    ConflictError,
    MentorshipError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from mentorship_api.routers import auth, mentorship, users

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[MentorshipError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
}


def error_status_code(exc: MentorshipError) -> int:
    for kind, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, kind):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_mentorship_error(request: Request, exc: MentorshipError) -> JSONResponse:
    code = error_status_code(exc)
    if isinstance(exc, UpstreamError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        detail = "A backing service failed. Please try again later."
    else:
        detail = exc.message
    return JSONResponse(status_code=code, content={"detail": detail})


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    application = FastAPI(title="Mentorship API")

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(MentorshipError, handle_mentorship_error)

    application.include_router(auth.router)
    application.include_router(users.router)
    application.include_router(mentorship.router)

    @application.get("/health")
    def health():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except SQLAlchemyError:
            logger.warning("Health check could not reach the database", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy"},
            )

    return application


app = create_app()
