import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from mentorship_api.config import MentorshipPolicy, settings
from mentorship_api.database import Base
from mentorship_api.dependencies import get_db
from mentorship_api.main import app
from mentorship_api.models.mentorship_connection import MentorshipConnection
from mentorship_api.models.mentorship_request import MentorshipRequest
from mentorship_api.services.mentorship import MentorshipService
from tests.factories import auth_headers, make_mentor, make_user

if settings.test_database_url.startswith("sqlite"):
    test_engine = create_engine(
        settings.test_database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    test_engine = create_engine(settings.test_database_url)
TestSession = sessionmaker(bind=test_engine)

TEST_POLICY = MentorshipPolicy(max_active_connections=2, max_pending_requests=2)


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestSession(bind=connection)
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def service(db):
    return MentorshipService(db, TEST_POLICY)


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@test.com", "Admin", role="admin", is_mentee=False)


@pytest.fixture
def mentor(db):
    return make_mentor(db, "mentor@test.com", "Mentor", bio="I mentor.")


@pytest.fixture
def mentee(db):
    return make_user(
        db,
        "mentee@test.com",
        "Mentee",
        full_name="Mentee Fullname",
        linkedin="linkedin.com/in/mentee",
    )


@pytest.fixture
def outsider(db):
    return make_user(db, "outsider@test.com", "Outsider")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def mentor_headers(mentor):
    return auth_headers(mentor)


@pytest.fixture
def mentee_headers(mentee):
    return auth_headers(mentee)


@pytest.fixture
def outsider_headers(outsider):
    return auth_headers(outsider)


@pytest.fixture
def pending_request(db, mentee, mentor):
    request = MentorshipRequest(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        topics=["x"],
        message="Could you help me?",
    )
    db.add(request)
    db.flush()
    return request


@pytest.fixture
def active_connection(db, mentee, mentor):
    request = MentorshipRequest(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        topics=["x"],
        status="accepted",
    )
    db.add(request)
    db.flush()
    connection = MentorshipConnection(
        mentee_id=mentee.id,
        mentor_id=mentor.id,
        request_id=request.id,
        topics=["x"],
    )
    db.add(connection)
    db.flush()
    return connection
