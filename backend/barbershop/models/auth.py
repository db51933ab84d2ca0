from __future__ import annotations

from ..extensions import db
from .enums import Role, BarberStatus, enum_column
from barbershop.time_utils import to_utc_z


class User(db.Model):
    """
    Admin and barber accounts.

    Email is globally unique: it is the sign-in identifier and the shop is
    derived from the account, not typed at login.

    INVARIANTS:
    - role=admin => status=active
    - role=barber starts as pending
    - shop_id is set once at creation
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_shop_role", "shop_id", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(32), nullable=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = enum_column(Role, nullable=False)
    status = enum_column(BarberStatus, nullable=False, default=BarberStatus.PENDING, index=True)

    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_by = db.Column(db.Integer, nullable=True)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    shop = db.relationship("Shop", backref=db.backref("users", lazy=True))

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role.value}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "shop_name": self.shop.name if self.shop else None,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
            "status": self.status.value,
            "approved_at": to_utc_z(self.approved_at),
            "approved_by": self.approved_by,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at),
        }


class SessionToken(db.Model):
    """
    Bearer session tokens.

    Only the SHA-256 hash of the token is stored. shop_id is captured at
    creation and stays fixed for the session lifetime.
    """
    __tablename__ = "session_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(64), nullable=True)

    user = db.relationship("User", backref=db.backref("sessions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "shop_id": self.shop_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
