from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from todo_app.models.base import (
    SCHEMA_NAME,
    Base,
    IntegerIdMixin,
    TimestampMixin,
    qualified,
)


class Comment(Base, IntegerIdMixin, TimestampMixin):
    """Comment left on a task; removed together with the task."""

    __tablename__ = "comments"
    __table_args__ = ({"schema": SCHEMA_NAME},)

    text = Column(Text, nullable=False)

    task_id = Column(
        Integer,
        ForeignKey(qualified("todo_tasks.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id = Column(
        Integer,
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        comment="Author of the comment",
    )

    task = relationship("TodoTask", back_populates="comments")

    author = relationship("User")

    def __repr__(self):
        return f"<Comment(id={self.id}, task_id={self.task_id}, user_id={self.user_id})>"
