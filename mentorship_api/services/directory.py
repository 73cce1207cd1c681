import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mentorship_api.exceptions import ParticipantNotFoundError, UpstreamError
from mentorship_api.models.user import User
from mentorship_api.schemas.mentorship import ContactInfo, PublicProfile

logger = logging.getLogger(__name__)


class ParticipantDirectory:
    """Reads participant profiles out of the ``users`` table."""

    def __init__(self, db: Session):
        self.db = db

    def get_public_profile(self, user_id: int) -> PublicProfile:
        """Profile of an existing user, deactivated accounts included.

        Raises:
            ParticipantNotFoundError: no user has this id.
        """
        try:
            user: User | None = self.db.get(User, user_id)
        except SQLAlchemyError as exc:
            logger.error("Profile lookup failed for user %s", user_id, exc_info=True)
            raise UpstreamError(f"profile lookup failed for user {user_id}") from exc
        if user is None:
            raise ParticipantNotFoundError()
        return PublicProfile(
            id=user.id,
            display_name=user.name,
            is_active=user.is_active,
            bio=user.bio,
            profile_picture=user.profile_picture,
            is_mentor=user.is_mentor,
            is_mentee=user.is_mentee,
            mentorship_bio=user.mentorship_bio,
            mentorship_topics=user.mentorship_topics or [],
            available_for_mentoring=user.available_for_mentoring,
            full_name=user.full_name,
            contact_info=ContactInfo(
                phone=user.phone,
                website=user.website,
                twitter=user.twitter,
                linkedin=user.linkedin,
            ),
        )

    def is_available_as_mentor(self, user_id: int) -> bool:
        """Whether the user takes new mentees.

        Raises:
            ParticipantNotFoundError: the user does not exist or is deactivated.
        """
        profile = self.get_public_profile(user_id)
        if not profile.is_active:
            raise ParticipantNotFoundError()
        return profile.is_mentor and profile.available_for_mentoring

    def lock_participants(self, *user_ids: int) -> None:
        """Hold row locks on the given users until the transaction ends.

        Ids are locked in ascending order so two callers locking the same
        pair cannot deadlock.
        """
        try:
            self.db.execute(
                select(User.id)
                .where(User.id.in_(sorted(set(user_ids))))
                .order_by(User.id)
                .with_for_update()
            ).all()
        except SQLAlchemyError as exc:
            logger.error("Could not lock users %s", user_ids, exc_info=True)
            raise UpstreamError(f"could not lock users {user_ids}") from exc
