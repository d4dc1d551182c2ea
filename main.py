# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from settings import get_settings

settings = get_settings()

# Logger setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger("comment_dedup")


# --------------------------
# DB SETUP
# --------------------------
from database.database import Base, engine
import models.subject
import models.comment

Base.metadata.create_all(bind=engine)


# --------------------------
# Routers
# --------------------------
from routes.comment_routes import router as comment_router
from routes.subject_routes import router as subject_router
from routes.excel_routes import router as excel_router


# --------------------------
# FastAPI App
# --------------------------
app = FastAPI(
    title="Comment Dedup",
    description="Historical comment collection with duplicate detection",
    version="1.0.0",
)


# --------------------------
# CORS
# --------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------
# Global Error Handler
# --------------------------
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={"success": False, "detail": "Internal server error"},
    )


# --------------------------
# Register API Routers
# --------------------------
app.include_router(subject_router, prefix="/subjects", tags=["Subjects"])
app.include_router(comment_router, prefix="/comments", tags=["Comments"])
app.include_router(excel_router, prefix="/excel", tags=["Excel"])


@app.get("/health")
def health():
    return {"ok": True, "service": "comment_dedup"}
