from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from mentorship_api.dependencies import AdminUser, CurrentUser, DbSession
from mentorship_api.models.user import User
from mentorship_api.schemas.user import ProfileUpdate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def get_me(user: CurrentUser):
    return user


@router.put("/me", response_model=UserRead)
def update_me(updates: ProfileUpdate, user: CurrentUser, db: DbSession):
    """Update the caller's profile, including mentorship availability."""
    for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)

    db.flush()
    db.refresh(user)
    return user


@router.get("", response_model=list[UserRead])
def list_users(admin: AdminUser, db: DbSession):
    users = db.execute(select(User)).scalars().all()
    return users


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, admin: AdminUser, db: DbSession):
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return user


@router.put("/{user_id}", response_model=UserRead)
def update_user(user_id: int, updates: UserUpdate, admin: AdminUser, db: DbSession):
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

    for field, value in updates.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    db.flush()
    db.refresh(user)
    return user
