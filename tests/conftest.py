import pytest
from httpx import AsyncClient, ASGITransport
from sqlmodel import Session, SQLModel

from passport.db import get_session, make_engine
from passport.main import app
from passport.models import Award, Event, User, UserRole
from passport.security import create_access_token

engine = make_engine("sqlite://")


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    def make_user(email: str, name: str = "Student", role: UserRole = UserRole.STUDENT, points: int = 0, password: str | None = None):
        user = User(name=name, email=email, role=role, current_points=points)
        if password:
            user.set_password(password)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return make_user


@pytest.fixture(name="make_event")
def make_event_fixture(session: Session):
    def make_event(points_allocation: int = 50, name: str = "Tech Talk"):
        event = Event(name=name, points_allocation=points_allocation)
        session.add(event)
        session.commit()
        session.refresh(event)
        return event
    return make_event


@pytest.fixture(name="make_award")
def make_award_fixture(session: Session):
    def make_award(points: int, name: str | None = None):
        award = Award(name=name or f"{points} club", points=points)
        session.add(award)
        session.commit()
        session.refresh(award)
        return award
    return make_award


@pytest.fixture(name="staff_headers")
def staff_headers_fixture(make_user):
    staff = make_user("staff@cmu.edu", name="Staff", role=UserRole.STAFF)
    token = create_access_token(staff.id, UserRole.STAFF.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="student_headers")
def student_headers_fixture(make_user):
    student = make_user("reader@cmu.edu", name="Reader")
    token = create_access_token(student.id, UserRole.STUDENT.value)
    return {"Authorization": f"Bearer {token}"}
