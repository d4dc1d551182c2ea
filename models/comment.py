# models/comment.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from database.database import Base
from utils.timeutils import utc_now


class HistoricalComment(Base):
    __tablename__ = "historical_comments"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)

    content = Column(Text, nullable=False)
    # cached at creation, only used for similarity scoring
    normalized_content = Column(Text, nullable=False)
    content_hash = Column(String(64), nullable=False)

    source_url = Column(String(2000), nullable=False)
    source_platform = Column(String, nullable=False, index=True)
    source_type = Column(String, nullable=False)
    source_name = Column(String(200), nullable=True)
    source_credibility = Column(Integer, nullable=False, default=5)

    image_url = Column(String(2000), nullable=True)
    video_url = Column(String(2000), nullable=True)
    additional_context = Column(Text, nullable=True)

    comment_date = Column(DateTime, nullable=False, index=True)
    published_at = Column(DateTime, default=utc_now)
    keywords = Column(JSON, nullable=False, default=list)

    is_verified = Column(Boolean, nullable=False, default=False, index=True)

    # points at the group's primary; NULL means this record is the primary
    duplicate_of = Column(
        Integer,
        ForeignKey("historical_comments.id"),
        nullable=True,
        index=True,
    )
    duplicate_group = Column(String(36), nullable=True, index=True)

    created_at = Column(DateTime, default=utc_now)

    subject = relationship("Subject", back_populates="comments")
    primary_comment = relationship(
        "HistoricalComment",
        remote_side=[id],
        back_populates="duplicates",
    )
    duplicates = relationship(
        "HistoricalComment",
        back_populates="primary_comment",
        order_by="HistoricalComment.id",
    )

    __table_args__ = (
        Index("ix_historical_comments_subject_hash", "subject_id", "content_hash"),
        Index("ix_historical_comments_subject_date", "subject_id", "comment_date"),
    )

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate_of is not None
