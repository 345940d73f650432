"""
Tags and their many-to-many link to tasks.

Architecture:
    TodoTask ←→ TaskTag ←→ Tag

Tag labels are not unique, not even per author.
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


class Tag(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "tags"
    __table_args__ = ({"schema": SCHEMA_NAME},)

    label = Column(String(100), nullable=False)

    user_id = Column(
        Integer,
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Author of the tag",
    )

    task_tags = relationship(
        "TaskTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Tag(id={self.id}, label='{self.label}')>"


class TaskTag(Base, IntegerIdMixin):
    __tablename__ = "task_tags"
    __table_args__ = (
        UniqueConstraint("tag_id", "task_id", name="uq_task_tag"),
        {"schema": SCHEMA_NAME},
    )

    task_id = Column(
        Integer,
        ForeignKey(qualified("todo_tasks.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    tag_id = Column(
        Integer,
        ForeignKey(qualified("tags.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    task = relationship("TodoTask", back_populates="task_tags")

    tag = relationship("Tag", back_populates="task_tags")
