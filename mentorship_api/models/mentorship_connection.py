import enum
from datetime import datetime

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from mentorship_api.database import Base


class ConnectionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ENDED = "ended"


class MentorshipConnection(Base):
    __tablename__ = "mentorship_connections"
    __table_args__ = (
        UniqueConstraint("request_id", name="uq_mentorship_connections_request"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    mentee_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    mentor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    request_id: Mapped[int] = mapped_column(ForeignKey("mentorship_requests.id"))
    status: Mapped[str] = mapped_column(String(20), default=ConnectionStatus.ACTIVE.value)
    topics: Mapped[list[str]] = mapped_column(JSON, default=list)
    started_at: Mapped[datetime] = mapped_column(server_default=func.now())
    last_interaction: Mapped[datetime | None] = mapped_column(default=None)
    ended_at: Mapped[datetime | None] = mapped_column(default=None)
    end_reason: Mapped[str | None] = mapped_column(Text, default=None)
    mentor_rating: Mapped[int | None] = mapped_column(default=None)
    mentor_feedback: Mapped[str | None] = mapped_column(Text, default=None)
    mentee_rating: Mapped[int | None] = mapped_column(default=None)
    mentee_feedback: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
