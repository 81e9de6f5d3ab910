import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from daycare.database import Base, get_db
from daycare.main import app
from daycare.models.user import User
from daycare.models.section import Section, SectionMember
from daycare.models.schedule import ClassSchedule

TEST_DB_URL = "sqlite:///./test_daycare.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(login_id="admin001", name="Admin", role="admin"),
        "teacher": User(login_id="teacher001", name="Teacher", role="teacher"),
        "parent": User(
            login_id="parent001",
            name="Parent Park",
            role="parent",
            child_name="Minji Park",
            rfid_tag="RFID-0001",
        ),
        "other_parent": User(
            login_id="parent002",
            name="Parent Choi",
            role="parent",
            child_name="Junho Choi",
            rfid_tag="RFID-0002",
        ),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_section(db, seed_users):
    section = Section(name="Sunflower", teacher_id=seed_users["teacher"].user_id)
    db.add(section)
    db.flush()
    db.add(SectionMember(section_id=section.section_id, user_id=seed_users["parent"].user_id))
    db.commit()
    db.refresh(section)
    return section


@pytest.fixture
def seed_schedule(db, seed_users, seed_section):
    schedule = ClassSchedule(
        section_id=seed_section.section_id,
        day="Monday",
        time_in_start="8:00 AM",
        time_in_end="8:30 AM",
        time_out_start="3:00 PM",
        time_out_end="4:00 PM",
        grace_period_minutes=15,
        created_by=seed_users["admin"].user_id,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def get_token(client, login_id: str) -> str:
    resp = client.post("/api/auth/login", json={"login_id": login_id})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, login_id: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, login_id)}"}


def schedule_qr(schedule_id: int, attendance_type: str | None = None) -> str:
    payload = {"type": "schedule", "id": schedule_id}
    if attendance_type:
        payload["attendanceType"] = attendance_type
    return json.dumps(payload)
