from mentorship_api.dependencies import create_access_token
from mentorship_api.models.user import User


def make_user(db, email, name, **fields):
    user = User(email=email, name=name, password_hash="x", **fields)
    user.set_password("secret123")
    db.add(user)
    db.flush()
    return user


def make_mentor(db, email, name="Mentor", **fields):
    fields.setdefault("mentorship_topics", ["x", "career"])
    return make_user(
        db,
        email,
        name,
        is_mentor=True,
        available_for_mentoring=True,
        full_name=f"{name} Fullname",
        phone="555-0100",
        **fields,
    )


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}
