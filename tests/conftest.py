import os
from contextlib import contextmanager
from datetime import datetime, timezone


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "Zerthyx Test",
        "ENVIRONMENT": "test",
        "SECRET_KEY": "test-secret",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "AUTO_CREATE_TABLES": "false",
        "DATABASE_URL": "sqlite://",
        "DAILY_RATE": "0.022",
        "MATURITY_DAYS": "45",
        "WITHDRAWAL_MIN": "10",
        "WITHDRAWAL_MAX": "5000",
        "LEDGER_TIMEZONE": "UTC",
        "SUPPORTED_BLOCKCHAINS": "TRC20,BEP20",
        "RATE_LIMIT_ENABLED": "false",
        "CORS_ORIGINS": "http://localhost:5173,http://localhost:3000",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

import zerthyx.models  # noqa: E402,F401
from zerthyx.core.database import Base  # noqa: E402
from zerthyx.models import User, UserRole  # noqa: E402
from zerthyx.utils.cache import clear_cache  # noqa: E402

T0 = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def make_user(db, email: str, role: UserRole = UserRole.USER) -> User:
    user = User(email=email, full_name=email.split("@")[0].title(), role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def investor(db):
    return make_user(db, "investor@example.com")


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN)


@contextmanager
def api_client(session_factory):
    from fastapi.testclient import TestClient

    from zerthyx.core.database import get_db
    from zerthyx.main import app

    app.dependency_overrides.clear()

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def seed_wallet(db, user_id: int, *, total_deposit="0", daily_earnings="0", total_profit="0", checkpoint=None, is_active=None):
    from decimal import Decimal

    from zerthyx.models import Wallet

    deposit = Decimal(total_deposit)
    wallet = Wallet(
        user_id=user_id,
        total_deposit=deposit,
        daily_earnings=Decimal(daily_earnings),
        total_profit=Decimal(total_profit),
        last_earnings_update=checkpoint,
        is_active=deposit > 0 if is_active is None else is_active,
        deposit_batch_count=0,
    )
    db.add(wallet)
    db.commit()
    db.refresh(wallet)
    return wallet
