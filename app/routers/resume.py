import logging
import os
from typing import Callable, List

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.limiter import limiter
from app.database import get_db, get_session_factory
from app.dependencies import get_current_user_id, get_pipeline_builder, get_storage
from app.schemas.resume import (
    ResumeAnalysisResponse,
    ResumeComparisonResponse,
    ResumeDetailResponse,
    ResumeResponse,
    ResumeUploadResponse,
    SignedUrlResponse,
)
from app.services import resume_records
from app.services.analysis_pipeline import run_analysis_task
from app.services.resume_insights import compare_resumes
from app.services.text_extractor import MIME_TYPES
from app.services.uploader import upload_resume

logger = logging.getLogger(__name__)

router = APIRouter()


def _file_response(data: bytes, file_name: str) -> Response:
    media_type = MIME_TYPES.get(os.path.splitext(file_name)[1].lower(), "application/octet-stream")
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'inline; filename="{os.path.basename(file_name)}"'},
    )


@router.post("/resumes/upload", response_model=ResumeUploadResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def upload(
    request: Request,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    pipeline_builder=Depends(get_pipeline_builder),
):
    """
    Store a resume and queue its analysis. The response carries the pending
    row; clients poll GET /resumes/{id} for the outcome.
    """
    # At most one byte past the limit is buffered
    data = await file.read(settings.max_upload_bytes + 1)
    resume = upload_resume(db, storage, user_id, file.filename, file.content_type, data)

    background_tasks.add_task(run_analysis_task, resume.id, user_id, session_factory, pipeline_builder)
    logger.info(f"Queued analysis for resume {resume.id}")
    return ResumeUploadResponse(resume=ResumeResponse.model_validate(resume))


@router.get("/resumes", response_model=List[ResumeDetailResponse])
def list_resumes(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return resume_records.get_user_resumes(db, user_id)


@router.get("/resumes/compare", response_model=ResumeComparisonResponse)
def compare(
    first: str = Query(...),
    second: str = Query(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return compare_resumes(db, first, second, user_id)


@router.get("/resumes/{resume_id}", response_model=ResumeDetailResponse)
def get_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return resume_records.get_owned_resume(db, resume_id, user_id)


@router.delete("/resumes/{resume_id}")
def delete_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    resume_records.delete_resume(db, resume_id, user_id, storage=storage)
    return {"message": "Resume deleted successfully"}


@router.post("/resumes/{resume_id}/analyze", response_model=ResumeAnalysisResponse)
def analyze_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    pipeline_builder=Depends(get_pipeline_builder),
):
    """Run the pipeline in-request for a resume that is still pending."""
    resume_records.get_owned_resume(db, resume_id, user_id)
    return pipeline_builder(db).run(resume_id, user_id)


@router.get("/resumes/{resume_id}/file")
def download_resume_file(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    resume = resume_records.get_owned_resume(db, resume_id, user_id)
    if not resume.file_path:
        raise NotFoundError("Resume file not found")
    return _file_response(storage.download(resume.file_path), resume.file_name)


@router.get("/resumes/{resume_id}/signed-url", response_model=SignedUrlResponse)
def signed_url(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    resume = resume_records.get_owned_resume(db, resume_id, user_id)
    if not resume.file_path:
        raise NotFoundError("Resume file not found")
    ttl = settings.storage.signed_url_ttl
    return SignedUrlResponse(url=storage.signed_url(resume.file_path, ttl), expires_in=ttl)


@router.get("/storage/{key:path}")
def download_stored_file(
    key: str,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    """Local-backend file route. Keys are namespaced by owner."""
    parts = key.split("/")
    if len(parts) < 2 or parts[0] != user_id or ".." in parts:
        raise NotFoundError("File not found")
    return _file_response(storage.download(key), key)
