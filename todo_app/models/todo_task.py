"""
To-do task model.

Every task belongs to exactly one list (cascade-deleted with it) and carries
a status from the fixed ``statuses`` table (delete restricted). The owner
user is the person the task is assigned to.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from todo_app.models.base import (
    SCHEMA_NAME,
    Base,
    IntegerIdMixin,
    TimestampMixin,
    qualified,
)
from todo_app.models.status import NOT_STARTED_STATUS_ID, SEED_STATUSES


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TodoTask(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "todo_tasks"
    __table_args__ = (
        Index("ix_todo_task_due_date", "due_date"),
        Index("ix_todo_task_status_id", "status_id"),
        Index("ix_todo_task_list_id", "list_id"),
        Index("ix_todo_task_owner_user_id", "owner_user_id"),
        {"schema": SCHEMA_NAME},
    )

    title = Column(String(200), nullable=False)

    description = Column(Text, nullable=True)

    creation_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    due_date = Column(DateTime(timezone=True), nullable=False)

    status_id = Column(
        Integer,
        ForeignKey(qualified("statuses.id"), ondelete="RESTRICT"),
        nullable=False,
        default=NOT_STARTED_STATUS_ID,
    )

    owner_user_id = Column(
        Integer,
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        comment="User the task is assigned to",
    )

    list_id = Column(
        Integer,
        ForeignKey(qualified("todo_lists.id"), ondelete="CASCADE"),
        nullable=False,
    )

    todo_list = relationship("TodoList", back_populates="tasks")

    status = relationship("Status", back_populates="tasks")

    owner_user = relationship("User")

    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    task_tags = relationship(
        "TaskTag",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def status_title(self) -> str | None:
        return SEED_STATUSES.get(self.status_id)

    def __repr__(self):
        return f"<TodoTask(id={self.id}, title='{self.title}', list_id={self.list_id})>"
