# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Registration and credential verification.

Accounts are created pending. authenticate() is the approval gate:
credentials first, then block, then approval. "No such user" and "wrong
password" are indistinguishable to the caller.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters, at most 72 UTF-8 bytes (bcrypt input limit)
- Bearer tokens are issued separately (see session_service.py)
"""

import re

import bcrypt
from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..models.auth import DOCUMENT_TYPES
from ..validation import ConflictError, ValidationError, require_fields


MIN_PASSWORD_LENGTH = 6
# bcrypt refuses passwords longer than this
MAX_PASSWORD_BYTES = 72
DOCUMENT_LENGTHS = {"cpf": 11, "cnpj": 14}

# Compared against when the username does not exist, so the response time
# does not reveal whether the account exists.
_DUMMY_HASH = bcrypt.hashpw(b"estoque-facil-dummy", bcrypt.gensalt(rounds=12)).decode("utf-8")


class AuthenticationError(Exception):
    """Bad credentials (401)."""


class ForbiddenError(Exception):
    """Valid identity, but the action is not allowed (403)."""


class AccountPendingError(ForbiddenError):
    """Account exists and password matched, but an admin has not approved it yet."""


class AccountBlockedError(ForbiddenError):
    """Account is blocked; carries the admin-supplied reason."""

    def __init__(self, reason: str | None):
        super().__init__("Usuário bloqueado")
        self.reason = reason


def validate_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"A senha deve ter no máximo {MAX_PASSWORD_BYTES} bytes")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt (BCRYPT_ROUNDS, default 12).

    Password is validated for length before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12) if has_app_context() else 12
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_document(document: str, document_type: str) -> str:
    """Strip punctuation from a CPF/CNPJ and check its digit count."""
    if document_type not in DOCUMENT_TYPES:
        raise ValidationError("Tipo de documento inválido")
    digits = re.sub(r"\D", "", document or "")
    if len(digits) != DOCUMENT_LENGTHS[document_type]:
        raise ValidationError(f"{document_type.upper()} inválido")
    return digits


def register_user(
    username: str,
    password: str,
    full_name: str,
    document: str,
    document_type: str,
) -> User:
    """
    Create a pending account.

    Raises:
        ValidationError: missing fields, bad document, short password
        ConflictError: username or document already registered
    """
    require_fields(
        {
            "username": username,
            "password": password,
            "nomeCompleto": full_name,
            "documento": document,
            "tipoDocumento": document_type,
        },
        ["username", "password", "nomeCompleto", "documento", "tipoDocumento"],
        "Todos os campos são obrigatórios",
    )

    username = username.strip()
    document_type = document_type.strip().lower()
    document = normalize_document(document, document_type)

    if db.session.query(User.id).filter_by(username=username).first():
        raise ConflictError("Nome de usuário já existe")

    if db.session.query(User.id).filter_by(document=document).first():
        raise ConflictError(f"{document_type.upper()} já cadastrado")

    user = User(
        username=username,
        password_hash=hash_password(password),
        full_name=full_name.strip(),
        document=document,
        document_type=document_type,
        is_admin=False,
        is_approved=False,
        is_blocked=False,
    )

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration with the same keys
        db.session.rollback()
        raise ConflictError("Nome de usuário ou documento já cadastrado")
    return user


def authenticate(username: str, password: str) -> User:
    """
    Verify credentials and enforce the approval gate.

    Returns the User on success.

    Raises:
        AuthenticationError: unknown username or wrong password (same message)
        AccountBlockedError: password matched but the account is blocked
        AccountPendingError: password matched but the account is not approved
    """
    user = db.session.query(User).filter_by(username=(username or "").strip()).first()

    if not user:
        verify_password(password or "", _DUMMY_HASH)
        raise AuthenticationError("Credenciais inválidas")

    if not verify_password(password or "", user.password_hash):
        raise AuthenticationError("Credenciais inválidas")

    if user.is_blocked:
        raise AccountBlockedError(user.block_reason)

    if not user.is_approved:
        raise AccountPendingError(
            "Usuário aguardando aprovação do administrador. "
            "Entre em contato com o administrador do sistema."
        )

    return user
