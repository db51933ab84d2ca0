# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Plays the auth-provider role: sign up, sign in, sign out, with the error
kinds InvalidCredentials, EmailInUse and WeakPassword.

TENANCY: every account belongs to exactly one shop. Registering an admin
creates the shop; registering a barber joins an existing shop as pending.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters
- Session tokens managed separately (see session_service.py)
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import EmailInUse, InvalidCredentials, NotFound, ValidationError, WeakPassword
from ..extensions import db
from ..models import User, Shop, Role, BarberStatus
from ..validation import coerce_int
from .concurrency import run_with_retry
from . import session_service
from barbershop.time_utils import utcnow


MIN_PASSWORD_LENGTH = 6


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword()


def hash_password(password: str) -> str:
    """Hash password using bcrypt (BCRYPT_ROUNDS, default 12) after the strength check."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email: str | None) -> str:
    value = (email or "").strip().lower()
    if not value or "@" not in value:
        raise ValidationError("A valid email is required")
    return value


def _require_name(name: str | None) -> str:
    value = (name or "").strip()
    if not value:
        raise ValidationError("Name is required")
    return value


def sign_up(
    *,
    email: str,
    password: str,
    name: str,
    shop_id: int,
    role: Role,
    status: BarberStatus,
    phone: str | None = None,
    created_by: int | None = None,
) -> int:
    """
    Create login credentials plus profile. Returns the new account id.

    Flushes but does not commit; callers own the unit of work.

    Raises:
        WeakPassword, EmailInUse, ValidationError
    """
    email = normalize_email(email)
    name = _require_name(name)
    password_hash = hash_password(password)

    if db.session.query(User.id).filter(User.email == email).first():
        raise EmailInUse()

    user = User(
        shop_id=shop_id,
        name=name,
        email=email,
        phone=(phone or "").strip() or None,
        password_hash=password_hash,
        role=role,
        status=status,
        created_by=created_by,
    )
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        # Lost a race against a concurrent sign-up with the same email
        db.session.rollback()
        raise EmailInUse()
    return user.id


def register_admin(*, name: str, email: str, password: str, shop_name: str, phone: str | None = None) -> User:
    """
    Register a shop owner. Creates the shop; admins are always active.
    """
    shop_name = (shop_name or "").strip()
    if not shop_name:
        raise ValidationError("Shop name is required")

    def _op():
        shop = Shop(name=shop_name, is_active=True)
        db.session.add(shop)
        db.session.flush()

        user_id = sign_up(
            email=email,
            password=password,
            name=name,
            shop_id=shop.id,
            role=Role.ADMIN,
            status=BarberStatus.ACTIVE,
            phone=phone,
        )
        user = db.session.get(User, user_id)
        user.approved_at = utcnow()
        db.session.commit()
        return user

    user = run_with_retry(_op)
    current_app.logger.info("Registered shop %s with admin %s", user.shop_id, user.id)
    return user


def register_barber(*, name: str, email: str, password: str, shop_id: int, phone: str | None = None) -> User:
    """
    Self-registration of a barber into an existing shop.

    The account starts pending and cannot act until an admin approves it.
    """
    shop_id = coerce_int(shop_id, "shop_id")

    def _op():
        shop = db.session.get(Shop, shop_id)
        if shop is None or not shop.is_active:
            raise NotFound("Shop not found")

        user_id = sign_up(
            email=email,
            password=password,
            name=name,
            shop_id=shop.id,
            role=Role.BARBER,
            status=BarberStatus.PENDING,
            phone=phone,
        )
        db.session.commit()
        return db.session.get(User, user_id)

    user = run_with_retry(_op)
    current_app.logger.info("Barber %s registered in shop %s, pending approval", user.id, user.shop_id)
    return user


def sign_in(email: str, password: str):
    """
    Authenticate and open a session.

    Pending, inactive and rejected barbers may sign in to see their status;
    barber actions check the status separately.

    Returns:
        (SessionToken, plaintext_token, User)

    Raises:
        InvalidCredentials for unknown email, wrong password or inactive shop
    """
    try:
        email = normalize_email(email)
    except ValidationError:
        raise InvalidCredentials()

    user = db.session.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password or "", user.password_hash):
        raise InvalidCredentials()

    shop = db.session.get(Shop, user.shop_id)
    if shop is None or not shop.is_active:
        raise InvalidCredentials()

    user.last_login_at = utcnow()
    db.session.commit()

    session, token = session_service.create_session(user.id)
    return session, token, user


def sign_out(token: str) -> bool:
    return session_service.revoke_session(token, reason="sign_out")


def list_shops() -> list[Shop]:
    """Active shops, for the barber registration shop picker."""
    return db.session.query(Shop).filter(Shop.is_active.is_(True)).order_by(Shop.name.asc()).all()
