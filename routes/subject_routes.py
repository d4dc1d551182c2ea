# routes/subject_routes.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database.database import get_db
from routes.comment_routes import get_dedup_service
from schemas.comment_schema import PrimaryCommentOut, SubjectCreate, SubjectOut
from services import comment_service
from services.dedup_service import CommentDeduplicationService
from services.errors import NotFoundError

router = APIRouter()


@router.post("/", response_model=SubjectOut, status_code=201)
def create_subject(item: SubjectCreate, db: Session = Depends(get_db)):
    return comment_service.create_subject(db, item.name, item.faction)


@router.get("/", response_model=List[SubjectOut])
def list_subjects(db: Session = Depends(get_db)):
    return comment_service.list_subjects(db)


@router.get("/comment-counts")
def comment_counts(
    ids: List[int] = Query(...),
    db: Session = Depends(get_db),
):
    return comment_service.count_primary_comments(db, ids)


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: int, db: Session = Depends(get_db)):
    try:
        return comment_service.get_subject(db, subject_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{subject_id}/primary-comments", response_model=List[PrimaryCommentOut])
def primary_comments(
    subject_id: int,
    limit: int = Query(50, ge=1, le=100),
    service: CommentDeduplicationService = Depends(get_dedup_service),
):
    return service.get_primary_comments(subject_id, limit=limit)
