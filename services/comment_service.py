# services/comment_service.py
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from models.comment import HistoricalComment
from models.subject import Subject
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class CommentFilters:
    subject_id: Optional[int] = None
    platform: Optional[str] = None
    verified: Optional[bool] = None
    source_type: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


# ----------------------------------------------------------
# Subjects
# ----------------------------------------------------------
def create_subject(db: Session, name: str, faction: Optional[str] = None) -> Subject:
    obj = Subject(name=name, faction=faction)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def list_subjects(db: Session) -> List[Subject]:
    return db.query(Subject).order_by(Subject.name.asc()).all()


def get_subject(db: Session, subject_id: int) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise NotFoundError(f"Subject {subject_id} not found")
    return subject


# ----------------------------------------------------------
# Comments
# ----------------------------------------------------------
def list_primary_comments(
    db: Session,
    filters: CommentFilters,
    page: int = 1,
    limit: int = 50,
    sort_by: str = "date",
    order: str = "desc",
) -> Tuple[List[HistoricalComment], int]:
    """
    Primary (non-duplicate) comments matching the filters, one page at a time.
    Returns the page and the total count.
    """
    query = db.query(HistoricalComment).filter(HistoricalComment.duplicate_of.is_(None))

    if filters.subject_id is not None:
        query = query.filter(HistoricalComment.subject_id == filters.subject_id)
    if filters.platform:
        query = query.filter(HistoricalComment.source_platform == filters.platform)
    if filters.verified is not None:
        query = query.filter(HistoricalComment.is_verified == filters.verified)
    if filters.source_type:
        query = query.filter(HistoricalComment.source_type == filters.source_type)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.filter(
            or_(
                HistoricalComment.content.ilike(pattern),
                HistoricalComment.source_name.ilike(pattern),
            )
        )
    if filters.date_from is not None:
        query = query.filter(HistoricalComment.comment_date >= filters.date_from)
    if filters.date_to is not None:
        query = query.filter(HistoricalComment.comment_date <= filters.date_to)

    total = query.count()

    column = (
        HistoricalComment.source_credibility
        if sort_by == "credibility"
        else HistoricalComment.comment_date
    )
    if order == "asc":
        query = query.order_by(column.asc(), HistoricalComment.id.asc())
    else:
        query = query.order_by(column.desc(), HistoricalComment.id.desc())

    items = (
        query.options(selectinload(HistoricalComment.duplicates))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_comment(db: Session, comment_id: int) -> HistoricalComment:
    comment = (
        db.query(HistoricalComment)
        .options(
            selectinload(HistoricalComment.duplicates),
            selectinload(HistoricalComment.primary_comment),
        )
        .filter(HistoricalComment.id == comment_id)
        .first()
    )
    if comment is None:
        raise NotFoundError(f"Comment {comment_id} not found")
    return comment


def set_verified(db: Session, comment_id: int, verified: bool) -> HistoricalComment:
    comment = db.get(HistoricalComment, comment_id)
    if comment is None:
        raise NotFoundError(f"Comment {comment_id} not found")
    comment.is_verified = verified
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s verified=%s", comment_id, verified)
    return comment


def bulk_set_verified(db: Session, comment_ids: List[int], verified: bool) -> int:
    updated = (
        db.query(HistoricalComment)
        .filter(HistoricalComment.id.in_(comment_ids))
        .update({HistoricalComment.is_verified: verified}, synchronize_session=False)
    )
    db.commit()
    logger.info("Bulk verify: %s comments set verified=%s", updated, verified)
    return updated


def delete_comments(db: Session, comment_ids: List[int]) -> int:
    """
    Delete comments. Duplicates that pointed at a deleted comment
    become primaries of their own.
    """
    orphaned = (
        db.query(HistoricalComment)
        .filter(HistoricalComment.duplicate_of.in_(comment_ids))
        .update({HistoricalComment.duplicate_of: None}, synchronize_session=False)
    )
    deleted = (
        db.query(HistoricalComment)
        .filter(HistoricalComment.id.in_(comment_ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Deleted %s comments, orphaned %s duplicates", deleted, orphaned)
    return deleted


def get_stats(db: Session) -> dict:
    primaries = db.query(HistoricalComment).filter(HistoricalComment.duplicate_of.is_(None))

    total = primaries.count()
    verified = primaries.filter(HistoricalComment.is_verified.is_(True)).count()

    by_platform = dict(
        db.query(HistoricalComment.source_platform, func.count(HistoricalComment.id))
        .filter(HistoricalComment.duplicate_of.is_(None))
        .group_by(HistoricalComment.source_platform)
        .all()
    )
    subjects = (
        db.query(func.count(func.distinct(HistoricalComment.subject_id)))
        .filter(HistoricalComment.duplicate_of.is_(None))
        .scalar()
    )

    return {
        "total": total,
        "by_platform": by_platform,
        "by_verification": {"verified": verified, "unverified": total - verified},
        "subjects_with_comments": subjects or 0,
    }


def count_primary_comments(db: Session, subject_ids: List[int]) -> Dict[int, int]:
    """Primary comment count per subject; subjects without comments map to 0."""
    if not subject_ids:
        return {}
    rows = (
        db.query(HistoricalComment.subject_id, func.count(HistoricalComment.id))
        .filter(
            HistoricalComment.subject_id.in_(subject_ids),
            HistoricalComment.duplicate_of.is_(None),
        )
        .group_by(HistoricalComment.subject_id)
        .all()
    )
    counts = {subject_id: 0 for subject_id in subject_ids}
    counts.update({subject_id: count for subject_id, count in rows})
    return counts
