# routes/comment_routes.py
import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database.database import get_db
from schemas.comment_schema import (
    BulkDeleteRequest,
    BulkVerifyRequest,
    CommentCreate,
    CommentCreated,
    CommentDetailOut,
    CommentOut,
    DuplicateCheck,
    DuplicateCheckRequest,
    PrimaryCommentOut,
    VerifyRequest,
)
from services import comment_service
from services.comment_service import CommentFilters
from services.dedup_service import CommentDeduplicationService
from services.errors import CommentValidationError, NotFoundError
from settings import Settings, get_settings
from utils.text_cleaner import matches_topic
from utils.timeutils import to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter()  # no prefix


def get_dedup_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CommentDeduplicationService:
    return CommentDeduplicationService(
        db,
        similarity_threshold=settings.SIMILARITY_THRESHOLD,
        match_window_days=settings.MATCH_WINDOW_DAYS,
    )


# ----------------------------------------------------------
@router.post("/", response_model=CommentCreated, status_code=201)
def create_comment(
    item: CommentCreate,
    service: CommentDeduplicationService = Depends(get_dedup_service),
    settings: Settings = Depends(get_settings),
):
    try:
        comment_service.get_subject(service.db, item.subject_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    topic = matches_topic(item.content)
    if settings.REQUIRE_TOPIC_MATCH and not topic["matches"]:
        logger.warning("Rejected off-topic comment for subject %s", item.subject_id)
        raise HTTPException(
            status_code=400,
            detail="Content is not related to the recruitment law topic",
        )

    try:
        comment = service.create_comment(item)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except CommentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return comment


@router.post("/check-duplicate", response_model=DuplicateCheck)
def check_duplicate_route(
    item: DuplicateCheckRequest,
    service: CommentDeduplicationService = Depends(get_dedup_service),
):
    try:
        return service.check_for_duplicates(item.subject_id, item.content, item.source_url)
    except CommentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/", summary="List primary comments")
def list_comments(
    subject_id: Optional[int] = Query(None, gt=0),
    platform: Optional[str] = None,
    verified: Optional[bool] = None,
    source_type: Optional[str] = None,
    search: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    sort_by: Literal["date", "credibility"] = "date",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
):
    filters = CommentFilters(
        subject_id=subject_id,
        platform=platform,
        verified=verified,
        source_type=source_type,
        search=search,
        date_from=to_naive_utc(date_from) if date_from else None,
        date_to=to_naive_utc(date_to) if date_to else None,
    )
    items, total = comment_service.list_primary_comments(
        db, filters, page=page, limit=limit, sort_by=sort_by, order=order
    )
    return {
        "success": True,
        "page": page,
        "limit": limit,
        "total": total,
        "has_more": page * limit < total,
        "data": [PrimaryCommentOut.model_validate(c) for c in items],
    }


@router.get("/stats")
def stats(db: Session = Depends(get_db)):
    return comment_service.get_stats(db)


@router.post("/bulk-verify")
def bulk_verify(item: BulkVerifyRequest, db: Session = Depends(get_db)):
    updated = comment_service.bulk_set_verified(db, item.comment_ids, item.verified)
    return {"success": updated, "failed": len(set(item.comment_ids)) - updated}


@router.post("/bulk-delete")
def bulk_delete(item: BulkDeleteRequest, db: Session = Depends(get_db)):
    deleted = comment_service.delete_comments(db, item.comment_ids)
    return {"success": deleted, "failed": len(set(item.comment_ids)) - deleted}


@router.get("/{comment_id}", response_model=CommentDetailOut)
def get_comment(comment_id: int, db: Session = Depends(get_db)):
    try:
        return comment_service.get_comment(db, comment_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.patch("/{comment_id}/verify", response_model=CommentOut)
def verify_comment(comment_id: int, item: VerifyRequest, db: Session = Depends(get_db)):
    try:
        return comment_service.set_verified(db, comment_id, item.verified)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.delete("/{comment_id}")
def delete_comment(comment_id: int, db: Session = Depends(get_db)):
    if comment_service.delete_comments(db, [comment_id]) == 0:
        raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")
    return {"success": True}
