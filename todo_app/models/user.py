"""
User model for authentication, list ownership and collaboration.

Architecture:
    User → TodoList → TodoTask → Comment
    User ←→ TodoListUserRole ←→ TodoList

Users own lists, hold Editor/Viewer role rows on lists owned by others,
author tags and comments, and keep named authentication tokens in
``UserToken`` rows.
"""

from sqlalchemy import Column, Index, String
from sqlalchemy.orm import relationship

from todo_app.models.base import SCHEMA_NAME, Base, IntegerIdMixin, TimestampMixin


class User(Base, IntegerIdMixin, TimestampMixin):
    """
    Registered account with a bcrypt password hash.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_username", "username", unique=True),
        {"schema": SCHEMA_NAME},
    )

    username = Column(
        String(50),
        nullable=False,
        comment="Unique username for user identification and login",
    )

    hashed_password = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password for secure authentication",
    )

    first_name = Column(String(100), nullable=False, default="")

    last_name = Column(String(100), nullable=False, default="")

    email = Column(String(255), nullable=True)

    lists = relationship(
        "TodoList",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Lists owned by this user",
    )

    list_roles = relationship(
        "TodoListUserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Editor/Viewer role assignments on lists owned by others",
    )

    tokens = relationship(
        "UserToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Named authentication token slots",
    )

    @property
    def display_name(self) -> str:
        """First name plus last-name initial, e.g. ``Jane D.``."""
        if self.last_name:
            return f"{self.first_name} {self.last_name[0]}."
        return self.first_name or self.username

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
