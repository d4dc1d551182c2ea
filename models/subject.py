# models/subject.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from database.database import Base
from utils.timeutils import utc_now


class Subject(Base):
    """Public figure that comments are attributed to."""

    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    faction = Column(String, nullable=True)

    created_at = Column(DateTime, default=utc_now)

    comments = relationship("HistoricalComment", back_populates="subject")
