"""
Collaborator roles on to-do lists.

``TodoListRole`` is a fixed lookup table seeded with Viewer (1) and Editor
(2); a role cannot be deleted while assignments reference it.
``TodoListUserRole`` assigns at most one such role per (list, user).
"""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from todo_app.models.base import (
    SCHEMA_NAME,
    Base,
    IntegerIdMixin,
    TimestampMixin,
    qualified,
)

VIEWER_ROLE_ID = 1
EDITOR_ROLE_ID = 2

SEED_LIST_ROLES = {
    VIEWER_ROLE_ID: "Viewer",
    EDITOR_ROLE_ID: "Editor",
}


class TodoListRole(Base, IntegerIdMixin):
    __tablename__ = "todo_list_roles"
    __table_args__ = ({"schema": SCHEMA_NAME},)

    role_name = Column(String(50), nullable=False, unique=True)

    assignments = relationship("TodoListUserRole", back_populates="role")

    def __repr__(self):
        return f"<TodoListRole(id={self.id}, role_name='{self.role_name}')>"


class TodoListUserRole(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "todo_list_user_roles"
    __table_args__ = (
        UniqueConstraint("list_id", "user_id", name="uq_todo_list_user_role"),
        {"schema": SCHEMA_NAME},
    )

    list_id = Column(
        Integer,
        ForeignKey(qualified("todo_lists.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id = Column(
        Integer,
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role_id = Column(
        Integer,
        ForeignKey(qualified("todo_list_roles.id"), ondelete="RESTRICT"),
        nullable=False,
    )

    todo_list = relationship("TodoList", back_populates="user_roles")

    user = relationship("User", back_populates="list_roles")

    role = relationship("TodoListRole", back_populates="assignments")

    @property
    def role_name(self) -> str | None:
        """Name of the assigned role, falling back to the seeded names."""
        if self.role is not None:
            return self.role.role_name
        return SEED_LIST_ROLES.get(self.role_id)

    def __repr__(self):
        return (
            f"<TodoListUserRole(list_id={self.list_id}, user_id={self.user_id}, "
            f"role_id={self.role_id})>"
        )
