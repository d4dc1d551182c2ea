# services/dedup_service.py
"""
Duplicate detection and group bookkeeping for historical comments.

A new comment is compared against what is already stored for the same
subject: first by exact content hash, then by Levenshtein similarity of
normalized content against recent comments. Matches are linked to the
group's primary (first-seen) comment instead of being rejected.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from models.comment import HistoricalComment
from models.subject import Subject
from schemas.comment_schema import CommentCreate, DuplicateCheck, SimilarComment
from services.errors import CommentValidationError, NotFoundError
from utils.comment_constants import default_credibility
from utils.text_cleaner import content_hash, matches_topic, normalize, similarity
from utils.timeutils import utc_now

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.85  # 85% similarity = duplicate
MATCH_WINDOW_DAYS = 90


class CommentDeduplicationService:
    def __init__(
        self,
        db: Session,
        similarity_threshold: float = SIMILARITY_THRESHOLD,
        match_window_days: int = MATCH_WINDOW_DAYS,
    ):
        self.db = db
        self.similarity_threshold = similarity_threshold
        self.match_window_days = match_window_days

    # ----------------------------------------------------------
    def check_for_duplicates(
        self,
        subject_id: int,
        content: str,
        source_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DuplicateCheck:
        """
        Check if content duplicates an existing comment of this subject.

        Read-only. Both the exact and the fuzzy branch report the group's
        primary as ``duplicate_of``, never an intermediate duplicate.
        """
        normalized = _require_text(content)
        digest = content_hash(content)

        # 1. exact hash match
        exact = (
            self.db.query(HistoricalComment)
            .filter(
                HistoricalComment.subject_id == subject_id,
                HistoricalComment.content_hash == digest,
            )
            .order_by(HistoricalComment.id.asc())
            .first()
        )
        if exact is not None:
            primary = self._resolve_primary(exact)
            logger.info(
                "Exact duplicate for subject %s: comment %s (primary %s)",
                subject_id, exact.id, primary.id,
            )
            return DuplicateCheck(
                is_duplicate=True,
                duplicate_of=primary.id,
                duplicate_group=primary.duplicate_group,
                similar_comments=[],
            )

        # 2. fuzzy match within the time window, measured from now
        now = now or utc_now()
        cutoff = now - timedelta(days=self.match_window_days)

        candidates = (
            self.db.query(HistoricalComment)
            .filter(
                HistoricalComment.subject_id == subject_id,
                HistoricalComment.comment_date >= cutoff,
            )
            .order_by(HistoricalComment.id.asc())
            .all()
        )

        scored = []
        for candidate in candidates:
            score = similarity(normalized, candidate.normalized_content)
            if score >= self.similarity_threshold:
                scored.append((score, candidate))

        if not scored:
            return DuplicateCheck(is_duplicate=False, similar_comments=[])

        # stable sort keeps store order among equal scores
        scored.sort(key=lambda pair: pair[0], reverse=True)
        best_score, best = scored[0]
        primary = self._resolve_primary(best)

        logger.info(
            "Fuzzy duplicate for subject %s: comment %s scored %.3f (primary %s)",
            subject_id, best.id, best_score, primary.id,
        )
        return DuplicateCheck(
            is_duplicate=True,
            duplicate_of=primary.id,
            duplicate_group=primary.duplicate_group,
            similar_comments=[
                SimilarComment(id=c.id, similarity=round(s, 3), content=c.content)
                for s, c in scored
            ],
        )

    # ----------------------------------------------------------
    def create_comment(self, data: CommentCreate, now: Optional[datetime] = None) -> HistoricalComment:
        """Store a comment, linking it to an existing group when it is a duplicate."""
        if self.db.get(Subject, data.subject_id) is None:
            raise NotFoundError(f"Subject {data.subject_id} not found")

        check = self.check_for_duplicates(data.subject_id, data.content, data.source_url, now=now)

        normalized = normalize(data.content)
        digest = content_hash(data.content)

        credibility = data.source_credibility or default_credibility(data.source_platform)
        keywords = data.keywords
        if keywords is None:
            keywords = matches_topic(data.content)["keywords"]

        if check.is_duplicate:
            duplicate_of = check.duplicate_of
            duplicate_group = check.duplicate_group or str(uuid.uuid4())
        else:
            duplicate_of = None
            duplicate_group = str(uuid.uuid4())

        obj = HistoricalComment(
            subject_id=data.subject_id,
            content=data.content,
            normalized_content=normalized,
            content_hash=digest,
            source_url=data.source_url,
            source_platform=data.source_platform,
            source_type=data.source_type,
            source_name=data.source_name,
            source_credibility=credibility,
            image_url=data.image_url,
            video_url=data.video_url,
            additional_context=data.additional_context,
            comment_date=data.comment_date,
            published_at=now or utc_now(),
            keywords=list(keywords),
            is_verified=False,
            duplicate_of=duplicate_of,
            duplicate_group=duplicate_group,
        )
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)

        logger.info(
            "Created comment %s for subject %s (duplicate_of=%s, group=%s)",
            obj.id, obj.subject_id, obj.duplicate_of, obj.duplicate_group,
        )
        return obj

    # ----------------------------------------------------------
    def get_primary_comments(self, subject_id: int, limit: int = 50) -> List[HistoricalComment]:
        return (
            self.db.query(HistoricalComment)
            .options(selectinload(HistoricalComment.duplicates))
            .filter(
                HistoricalComment.subject_id == subject_id,
                HistoricalComment.duplicate_of.is_(None),
            )
            .order_by(HistoricalComment.comment_date.desc(), HistoricalComment.id.desc())
            .limit(limit)
            .all()
        )

    # ----------------------------------------------------------
    def _resolve_primary(self, comment: HistoricalComment) -> HistoricalComment:
        seen = {comment.id}
        while comment.duplicate_of is not None:
            parent = self.db.get(HistoricalComment, comment.duplicate_of)
            if parent is None or parent.id in seen:
                break
            seen.add(parent.id)
            comment = parent
        return comment


def _require_text(content) -> str:
    if not isinstance(content, str) or not content.strip():
        raise CommentValidationError("content must be a non-empty string")
    normalized = normalize(content)
    if not normalized:
        raise CommentValidationError("content has no text left after normalization")
    return normalized
