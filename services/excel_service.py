# services/excel_service.py
import logging
import pandas as pd
from pydantic import ValidationError

from schemas.comment_schema import CommentCreate
from services.dedup_service import CommentDeduplicationService
from services.errors import CommentValidationError, NotFoundError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "subject_id",
    "content",
    "source_url",
    "source_platform",
    "source_type",
    "comment_date",
)
OPTIONAL_COLUMNS = ("source_name", "source_credibility", "keywords")


def _row_payload(row: pd.Series) -> dict:
    payload = {col: row[col] for col in REQUIRED_COLUMNS}
    empty = [col for col, value in payload.items() if pd.isna(value)]
    if empty:
        raise CommentValidationError(f"Empty required cells: {', '.join(empty)}")

    payload["subject_id"] = int(payload["subject_id"])
    payload["content"] = str(payload["content"]).strip()
    payload["comment_date"] = pd.Timestamp(payload["comment_date"]).to_pydatetime()

    for col in OPTIONAL_COLUMNS:
        if col not in row.index or pd.isna(row[col]):
            continue
        value = row[col]
        if col == "source_credibility":
            if float(value) != int(value):
                raise CommentValidationError(f"source_credibility must be a whole number, got {value}")
            value = int(value)
        elif col == "keywords":
            value = [k.strip() for k in str(value).split(",") if k.strip()]
        payload[col] = value
    return payload


def import_comments(df: pd.DataFrame, service: CommentDeduplicationService) -> dict:
    """
    Run every row through the regular creation flow.
    A bad row is recorded and skipped; it never aborts the import.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise CommentValidationError(f"Missing columns: {', '.join(missing)}")

    summary = {"processed": 0, "saved": 0, "duplicates": 0, "errors": 0, "details": []}

    for idx, row in df.iterrows():
        summary["processed"] += 1
        try:
            data = CommentCreate(**_row_payload(row))
            comment = service.create_comment(data)
        except (ValidationError, ValueError, TypeError, NotFoundError) as exc:
            logger.warning("Skipping row %s: %s", idx, exc)
            summary["errors"] += 1
            summary["details"].append({"row": int(idx), "status": "error", "detail": str(exc)})
            continue

        summary["saved"] += 1
        if comment.is_duplicate:
            summary["duplicates"] += 1
        summary["details"].append({
            "row": int(idx),
            "status": "duplicate" if comment.is_duplicate else "saved",
            "id": comment.id,
            "duplicate_of": comment.duplicate_of,
            "duplicate_group": comment.duplicate_group,
        })

    logger.info(
        "Excel import: processed=%s saved=%s duplicates=%s errors=%s",
        summary["processed"], summary["saved"], summary["duplicates"], summary["errors"],
    )
    return summary

