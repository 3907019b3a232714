"""
Pytest fixtures for Estoque Fácil backend tests.

Provides test database setup, account fixtures, and test client.
"""

import itertools
import io

import pytest
from estoque_facil import create_app
from estoque_facil.extensions import db
from estoque_facil.models import User
from estoque_facil.services import settings_service
from estoque_facil.services.auth_service import hash_password
from estoque_facil.time_utils import utcnow


DEFAULT_PASSWORD = "secret1"

_document_counter = itertools.count(1)


def next_cpf() -> str:
    """Unique 11-digit document for fixture accounts."""
    return f"{next(_document_counter):011d}"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp('uploads')),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.expunge_all()
        settings_service.ensure_default_settings()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_user(db_session):
    """
    Factory for accounts inserted directly, bypassing registration.

    Defaults to an approved, unblocked, non-admin account.
    """
    def _make_user(
        username: str,
        password: str = DEFAULT_PASSWORD,
        *,
        admin: bool = False,
        approved: bool = True,
        blocked: bool = False,
        block_reason: str | None = None,
        full_name: str | None = None,
    ) -> User:
        user = User(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name or username.title(),
            document=next_cpf(),
            document_type="cpf",
            is_admin=admin,
            is_approved=approved or admin,
            approved_at=utcnow() if (approved or admin) else None,
            is_blocked=blocked,
            block_reason=block_reason,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope='function')
def admin_user(make_user):
    return make_user("alice", admin=True, full_name="Alice Admin")


@pytest.fixture(scope='function')
def approved_user(make_user, admin_user):
    return make_user("carol", full_name="Carol Comerciante")


@pytest.fixture(scope='function')
def other_user(make_user, admin_user):
    """Second approved tenant, for isolation checks."""
    return make_user("dave", full_name="Dave Distribuidor")


@pytest.fixture(scope='function')
def pending_user(make_user, admin_user):
    return make_user("bob", "secret2", approved=False, full_name="Bob Pendente")


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, "alice", DEFAULT_PASSWORD))


@pytest.fixture(scope='function')
def user_headers(client, approved_user):
    return auth_headers(get_auth_token(client, "carol", DEFAULT_PASSWORD))


@pytest.fixture(scope='function')
def other_headers(client, other_user):
    return auth_headers(get_auth_token(client, "dave", DEFAULT_PASSWORD))


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def registration_payload(username: str, password: str = DEFAULT_PASSWORD, **overrides) -> dict:
    payload = {
        'username': username,
        'password': password,
        'nomeCompleto': f'{username.title()} da Silva',
        'documento': next_cpf(),
        'tipoDocumento': 'cpf',
    }
    payload.update(overrides)
    return payload


def create_product(client, headers, **fields) -> dict:
    """POST /api/produtos as multipart form; returns the JSON body."""
    data = {
        'nome': 'Camiseta',
        'precoCompra': '10',
        'quantidadeComprada': '100',
    }
    data.update({k: str(v) for k, v in fields.items() if k != 'imagem'})
    if 'imagem' in fields:
        data['imagem'] = fields['imagem']
    response = client.post('/api/produtos', data=data, headers=headers, content_type='multipart/form-data')
    assert response.status_code == 201, response.json
    return response.json


def fake_image(name: str = 'foto.png', content: bytes = b'\x89PNG\r\n\x1a\nfake') -> tuple:
    return (io.BytesIO(content), name, 'image/png')
