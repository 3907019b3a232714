"""
Registration, login and profile tests.

Verifies:
- Registration creates pending accounts; duplicates are 409
- The first account on a fresh install becomes administrator
- Login gate: bad credentials 401, pending 403, blocked 403 with reason
- Issued tokens carry the account identity
"""

import jwt

from estoque_facil.extensions import db
from estoque_facil.models import User
from estoque_facil.services import account_service

from conftest import auth_headers, get_auth_token, registration_payload


# =============================================================================
# REGISTRATION
# =============================================================================


class TestRegistration:
    def test_first_account_becomes_admin(self, client, db_session):
        resp = client.post("/api/register", json=registration_payload("alice", "secret1"))
        assert resp.status_code == 201
        assert resp.json["isAdmin"] is True

        alice = db_session.query(User).filter_by(username="alice").one()
        assert alice.is_admin is True
        assert alice.is_approved is True
        assert alice.approved_at is not None

    def test_later_accounts_start_pending(self, client, db_session, admin_user):
        resp = client.post("/api/register", json=registration_payload("bob", "secret2"))
        assert resp.status_code == 201
        assert "Aguarde aprovação" in resp.json["message"]
        assert "isAdmin" not in resp.json

        bob = db_session.query(User).filter_by(username="bob").one()
        assert bob.is_approved is False
        assert bob.is_admin is False
        assert bob.is_blocked is False

    def test_password_is_hashed(self, client, db_session, admin_user):
        client.post("/api/register", json=registration_payload("bob", "secret2"))
        bob = db_session.query(User).filter_by(username="bob").one()
        assert bob.password_hash != "secret2"
        assert bob.password_hash.startswith("$2")

    def test_document_is_normalized(self, client, db_session, admin_user):
        payload = registration_payload("empresa", documento="12.345.678/0001-90", tipoDocumento="cnpj")
        resp = client.post("/api/register", json=payload)
        assert resp.status_code == 201

        user = db_session.query(User).filter_by(username="empresa").one()
        assert user.document == "12345678000190"
        assert user.document_type == "cnpj"

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/register", json={"username": "x", "password": "secret1"})
        assert resp.status_code == 400
        assert resp.json["error"] == "Todos os campos são obrigatórios"

    def test_short_password(self, client, db_session):
        resp = client.post("/api/register", json=registration_payload("shorty", "12345"))
        assert resp.status_code == 400

    def test_password_over_bcrypt_limit(self, client, db_session):
        resp = client.post("/api/register", json=registration_payload("zed", "a" * 80))
        assert resp.status_code == 400
        assert resp.json["error"] == "A senha deve ter no máximo 72 bytes"
        assert db_session.query(User).filter_by(username="zed").count() == 0

        # 36 two-byte characters is exactly the limit
        resp = client.post("/api/register", json=registration_payload("zed", "ç" * 36))
        assert resp.status_code == 201

    def test_array_body_is_rejected(self, client, db_session):
        resp = client.post("/api/register", json=[1])
        assert resp.status_code == 400
        assert resp.json["error"] == "Corpo da requisição inválido"

        resp = client.post("/api/login", json=["alice", "secret1"])
        assert resp.status_code == 400

    def test_wrong_document_length(self, client, db_session):
        resp = client.post("/api/register", json=registration_payload("x", documento="123"))
        assert resp.status_code == 400
        assert resp.json["error"] == "CPF inválido"

    def test_unknown_document_type(self, client, db_session):
        resp = client.post("/api/register", json=registration_payload("x", tipoDocumento="rg"))
        assert resp.status_code == 400

    def test_duplicate_username_conflict(self, client, db_session, admin_user):
        resp = client.post("/api/register", json=registration_payload("alice"))
        assert resp.status_code == 409
        assert resp.json["error"] == "Nome de usuário já existe"

        # Original row untouched
        assert db_session.query(User).filter_by(username="alice").count() == 1
        assert db_session.query(User).filter_by(username="alice").one().is_admin is True

    def test_duplicate_document_conflict(self, client, db_session, admin_user):
        resp = client.post("/api/register", json=registration_payload("bob", documento=admin_user.document))
        assert resp.status_code == 409
        assert resp.json["error"] == "CPF já cadastrado"
        assert db_session.query(User).filter_by(username="bob").first() is None


# =============================================================================
# LOGIN
# =============================================================================


class TestLogin:
    def test_success_returns_token_and_identity(self, app, client, admin_user):
        resp = client.post("/api/login", json={"username": "alice", "password": "secret1"})
        assert resp.status_code == 200
        body = resp.json
        assert body["userId"] == admin_user.id
        assert body["username"] == "alice"
        assert body["isAdmin"] is True

        claims = jwt.decode(body["token"], app.config["SECRET_KEY"], algorithms=["HS256"])
        assert claims["sub"] == admin_user.id
        assert claims["username"] == "alice"
        assert claims["isAdmin"] is True
        assert claims["exp"] > claims["iat"]

    def test_wrong_password(self, client, admin_user):
        resp = client.post("/api/login", json={"username": "alice", "password": "wrong!!"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Credenciais inválidas"

    def test_unknown_user_same_message(self, client, db_session):
        resp = client.post("/api/login", json={"username": "ghost", "password": "whatever"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Credenciais inválidas"

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/login", json={"username": "alice"})
        assert resp.status_code == 400

    def test_pending_account_forbidden(self, client, pending_user):
        resp = client.post("/api/login", json={"username": "bob", "password": "secret2"})
        assert resp.status_code == 403
        assert resp.json["pending"] is True
        assert "aguardando aprovação" in resp.json["error"]

    def test_pending_account_wrong_password_is_401(self, client, pending_user):
        resp = client.post("/api/login", json={"username": "bob", "password": "nope123"})
        assert resp.status_code == 401

    def test_blocked_account_forbidden_with_reason(self, client, make_user, admin_user):
        make_user("eve", blocked=True, block_reason="Pagamento em atraso")
        resp = client.post("/api/login", json={"username": "eve", "password": "secret1"})
        assert resp.status_code == 403
        assert resp.json["blocked"] is True
        assert resp.json["reason"] == "Pagamento em atraso"

    def test_approval_scenario(self, client, db_session):
        """alice bootstraps as admin, bob waits for her approval."""
        client.post("/api/register", json=registration_payload("alice", "secret1"))
        client.post("/api/register", json=registration_payload("bob", "secret2"))

        resp = client.post("/api/login", json={"username": "bob", "password": "secret2"})
        assert resp.status_code == 403

        alice_token = get_auth_token(client, "alice", "secret1")
        assert alice_token is not None

        bob = db_session.query(User).filter_by(username="bob").one()
        resp = client.post(f"/api/admin/users/{bob.id}/approve", headers=auth_headers(alice_token))
        assert resp.status_code == 200

        resp = client.post("/api/login", json={"username": "bob", "password": "secret2"})
        assert resp.status_code == 200
        assert resp.json["isAdmin"] is False


# =============================================================================
# PROFILE / TOKEN LIFETIME
# =============================================================================


class TestProfile:
    def test_me_returns_profile(self, client, approved_user, user_headers):
        resp = client.get("/api/users/me", headers=user_headers)
        assert resp.status_code == 200
        body = resp.json
        assert body["id"] == approved_user.id
        assert body["nomeCompleto"] == "Carol Comerciante"
        assert body["tipoDocumento"] == "cpf"
        assert body["isApproved"] is True
        assert "password_hash" not in body
        assert "passwordHash" not in body

    def test_token_of_deleted_account_is_401(self, client, approved_user, user_headers, admin_user):
        account_service.delete_user(admin_user.id, approved_user.id)
        resp = client.get("/api/users/me", headers=user_headers)
        assert resp.status_code == 401

    def test_token_of_blocked_account_is_403(self, client, approved_user, user_headers, admin_user):
        account_service.block_user(admin_user.id, approved_user.id, "Fraude")
        resp = client.get("/api/users/me", headers=user_headers)
        assert resp.status_code == 403
        assert resp.json["reason"] == "Fraude"

    def test_expired_token_is_401(self, app, client, approved_user):
        app.config["TOKEN_EXPIRATION_MINUTES"] = -1
        try:
            with app.test_request_context():
                from estoque_facil.services import session_service
                token = session_service.create_token(db.session.get(User, approved_user.id))
        finally:
            app.config["TOKEN_EXPIRATION_MINUTES"] = 60
        resp = client.get("/api/users/me", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_tampered_token_is_401(self, client, user_headers):
        headers = {"Authorization": user_headers["Authorization"] + "x"}
        resp = client.get("/api/users/me", headers=headers)
        assert resp.status_code == 401
