"""Minimal user row referenced by deck ownership.

Accounts are issued by the authentication service; this table only mirrors
the identifiers the deck store and the session loader need.
"""

from __future__ import annotations

from flask_login import UserMixin
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash

from ..db_instance import db


class User(UserMixin, db.Model):
    """Application user model."""

    __tablename__ = 'users'

    ROLE_USER = 'user'

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=True)
    user_role = db.Column(db.String(50), default=ROLE_USER, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    decks = db.relationship('Deck', backref='owner', lazy=True)

    def get_id(self):
        return str(self.user_id)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def __repr__(self):
        return f"<User {self.user_id}: {self.username}>"
