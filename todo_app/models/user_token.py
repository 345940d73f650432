"""
Named per-user authentication token slots.

A slot is identified by (user_id, login_provider, name) and holds a single
string value; writing a slot overwrites it. The API keeps the current
access token and the refresh payload under the ``JwtBearer`` provider; the
web front end keeps its own copies under ``WebApp``.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from todo_app.models.base import (
    SCHEMA_NAME,
    Base,
    IntegerIdMixin,
    TimestampMixin,
    qualified,
)

API_LOGIN_PROVIDER = "JwtBearer"
WEB_LOGIN_PROVIDER = "WebApp"
ACCESS_TOKEN_NAME = "JwtToken"
REFRESH_TOKEN_NAME = "JwtRefreshToken"


class UserToken(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "user_tokens"
    __table_args__ = (
        UniqueConstraint("user_id", "login_provider", "name", name="uq_user_token_slot"),
        {"schema": SCHEMA_NAME},
    )

    user_id = Column(
        Integer,
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    login_provider = Column(String(64), nullable=False)

    name = Column(String(64), nullable=False)

    value = Column(Text, nullable=False)

    user = relationship("User", back_populates="tokens")

    def __repr__(self):
        return f"<UserToken(user_id={self.user_id}, slot='{self.login_provider}/{self.name}')>"
