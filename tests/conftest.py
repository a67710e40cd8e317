from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from voucher_admin.db import get_db
from voucher_admin.main import app
from voucher_admin.models.base import Base
from voucher_admin import models as _models  # noqa: F401


@pytest.fixture()
def engine(tmp_path):
    # File-backed so concurrent requests each get their own connection.
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'vouchers.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    RequestSession = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)

    def override_get_db():
        db = RequestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)
