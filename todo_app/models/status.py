from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from todo_app.models.base import SCHEMA_NAME, Base, IntegerIdMixin

NOT_STARTED_STATUS_ID = 1
IN_PROGRESS_STATUS_ID = 2
COMPLETED_STATUS_ID = 3

SEED_STATUSES = {
    NOT_STARTED_STATUS_ID: "Not Started",
    IN_PROGRESS_STATUS_ID: "In Progress",
    COMPLETED_STATUS_ID: "Completed",
}


class Status(Base, IntegerIdMixin):
    """Fixed task status lookup; rows are seeded and never deleted while in use."""

    __tablename__ = "statuses"
    __table_args__ = ({"schema": SCHEMA_NAME},)

    status_title = Column(String(50), nullable=False, unique=True)

    tasks = relationship("TodoTask", back_populates="status")

    def __repr__(self):
        return f"<Status(id={self.id}, status_title='{self.status_title}')>"
