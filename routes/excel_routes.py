from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
from io import BytesIO
import pandas as pd

from routes.comment_routes import get_dedup_service
from services.dedup_service import CommentDeduplicationService
from services.errors import CommentValidationError
from services.excel_service import import_comments

router = APIRouter()

@router.post("/upload-comments")
async def upload_comments(
    file: UploadFile = File(...),
    page: int = 1,
    limit: int = 20,
    details: bool = True,
    service: CommentDeduplicationService = Depends(get_dedup_service),
):
    if not (file.filename or "").lower().endswith((".xlsx", ".xls")):
        raise HTTPException(status_code=400, detail="Only Excel files allowed")

    # read uploaded file
    contents = await file.read()

    # parse excel file
    try:
        df = pd.read_excel(BytesIO(contents))
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid Excel file")

    # run every row through the creation flow
    try:
        summary = import_comments(df, service)
    except CommentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    all_details = summary["details"]

    # pagination / detail toggling
    if details:
        start = (page - 1) * limit
        end = start + limit
        paginated = all_details[start:end]
    else:
        paginated = []

    return {
        "processed": summary["processed"],
        "saved": summary["saved"],
        "duplicates": summary["duplicates"],
        "errors": summary["errors"],
        "total_details": len(all_details),
        "page": page,
        "limit": limit,
        "details": paginated,
    }
