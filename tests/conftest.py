import itertools
import os
from datetime import timedelta
from decimal import Decimal

# Must be set before chon.db.database is imported
os.environ.setdefault("PYTEST_RUNNING", "1")
os.environ["JOB_DISPATCH_MODE"] = "sync"

import pytest
from fastapi.testclient import TestClient

from chon.api.main import app
from chon.db import database, models
from chon.db.repositories import tokens as token_repo
from chon.services import reset_express_api_client_for_tests, reset_fcm_service_for_tests
from chon.utils.feature_flags import refresh_feature_flag_cache

_ISOLATED_ENV = (
    "FCM_PROJECT_ID",
    "FCM_ACCESS_TOKEN",
    "FCM_CREDENTIALS_FILE",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "EXPRESS_API_BASE_URL",
    "EXPRESS_API_ADMIN_TOKEN",
    "SCHEDULED_NOTIFICATIONS_ENABLED",
    "COMPETITION_TIMEZONE",
    "ADVERTISING_PUBLIC_BASE_URL",
)


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch):
    """Start every test with no push credentials and lifecycle pushes switched off."""
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JOB_DISPATCH_MODE", "sync")
    # Tests that cover lifecycle pushes switch this back on explicitly
    monkeypatch.setenv("COMPETITION_NOTIFICATIONS_ENABLED", "false")
    refresh_feature_flag_cache()
    reset_express_api_client_for_tests()
    reset_fcm_service_for_tests()
    yield
    refresh_feature_flag_cache()
    reset_express_api_client_for_tests()
    reset_fcm_service_for_tests()


# Per-test schema reset on the shared in-memory database
@pytest.fixture(autouse=True)
def db_session():
    models.Base.metadata.drop_all(bind=database.engine)
    models.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


# Backwards compatibility: some tests read more naturally with a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def player_factory(db_session):
    counter = itertools.count(1)

    def _create(**overrides) -> models.Player:
        n = next(counter)
        fields = {"whatsapp_number": f"+9647500{n:05d}", "nickname": f"player{n}"}
        fields.update(overrides)
        player = models.Player(**fields)
        db_session.add(player)
        db_session.commit()
        db_session.refresh(player)
        return player

    return _create


# open/start/end offsets in hours relative to now
_SCHEDULES = {
    "upcoming": (1, 2, 3),
    "open": (-1, 1, 2),
    "active": (-2, -1, 1),
    "completed": (-3, -2, -1),
}


@pytest.fixture
def competition_factory(db_session):
    counter = itertools.count(1)

    def _create(status: str = "upcoming", **overrides) -> models.Competition:
        n = next(counter)
        now = models.now_utc()
        open_h, start_h, end_h = _SCHEDULES[status]
        fields = {
            "name": f"Competition {n}",
            "description": "Weekly quiz",
            "entry_fee": Decimal("5.00"),
            "open_time": now + timedelta(hours=open_h),
            "start_time": now + timedelta(hours=start_h),
            "end_time": now + timedelta(hours=end_h),
            "max_users": 100,
            "game_type": "trivia",
        }
        fields.update(overrides)
        competition = models.Competition(**fields)
        db_session.add(competition)
        db_session.commit()
        db_session.refresh(competition)
        return competition

    return _create


def _token_headers(db_session, *, role: str, email: str):
    user = models.User(name=role.title(), email=email, role=role)
    db_session.add(user)
    db_session.commit()
    _, full_token = token_repo.create_token(db_session, user_id=user.id, name=f"{role} token")
    return {"Authorization": f"Bearer {full_token}"}


@pytest.fixture
def admin_headers(db_session):
    return _token_headers(db_session, role="admin", email="admin@chonapp.net")


@pytest.fixture
def editor_headers(db_session):
    return _token_headers(db_session, role="editor", email="editor@chonapp.net")
