"""
To-do list model.

A list has exactly one owner (cascade-deleted with the owner), holds tasks
(cascade) and Editor/Viewer role assignments for collaborators (cascade).
The owner's role is implied by ``owner_id`` and never stored as a row.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from todo_app.models.base import (
    SCHEMA_NAME,
    Base,
    IntegerIdMixin,
    TimestampMixin,
    qualified,
)


class TodoList(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "todo_lists"
    __table_args__ = (
        Index("ix_todo_lists_owner_id", "owner_id"),
        {"schema": SCHEMA_NAME},
    )

    title = Column(String(200), nullable=False)

    description = Column(Text, nullable=False, default="")

    owner_id = Column(
        Integer,
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        comment="The single owner of the list",
    )

    owner = relationship("User", back_populates="lists")

    tasks = relationship(
        "TodoTask",
        back_populates="todo_list",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    user_roles = relationship(
        "TodoListUserRole",
        back_populates="todo_list",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<TodoList(id={self.id}, title='{self.title}', owner_id={self.owner_id})>"
