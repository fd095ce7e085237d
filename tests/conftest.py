# tests/conftest.py
import os
import tempfile
import uuid

# La app lee la configuración al importarse: se fija antes de cualquier import del servicio
_TMP_DIR = tempfile.mkdtemp(prefix="auth_service_tests_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/auth_app.db")
os.environ.setdefault("JWT_SECRET", "secreto-de-pruebas")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from auth_service.db import create_db_engine, get_db, init_db, make_session_dependency
from auth_service.service import AuthService
from auth_service.store import CredentialStore
from auth_service.utils import TokenManager

TEST_SECRET = "secreto-de-pruebas"
TEST_PASSWORD = "pw123"


@pytest.fixture
def engine(tmp_path):
    """Base SQLite nueva por test, con las tablas creadas."""
    engine = create_db_engine(f"sqlite:///{tmp_path}/test.db")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def tokens():
    return TokenManager(secret=TEST_SECRET)


@pytest.fixture
def store(db_session):
    return CredentialStore(db_session)


@pytest.fixture
def service(store, tokens):
    return AuthService(store, tokens)


@pytest.fixture
def client(engine, tokens):
    """
    TestClient de la app con `get_db` apuntando a la base del test
    y un TokenManager con el secreto de pruebas.
    """
    from auth_service.main import app, get_token_manager

    app.dependency_overrides[get_db] = make_session_dependency(engine)
    app.dependency_overrides[get_token_manager] = lambda: tokens
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# Fixture de utilidad para generar emails únicos
@pytest.fixture
def unique_email():
    return f"testuser_{uuid.uuid4()}@example.com"


@pytest.fixture
def registered_user(client, unique_email):
    """Registra un usuario vía API y devuelve la respuesta JSON junto con la contraseña."""
    r = client.post(
        "/api/auth/register",
        json={"name": "Ana", "email": unique_email, "password": TEST_PASSWORD},
    )
    assert r.status_code == 201, r.text
    return {**r.json(), "password": TEST_PASSWORD}


@pytest.fixture
def auth_headers(registered_user):
    return {"Authorization": f"Bearer {registered_user['token']}"}
