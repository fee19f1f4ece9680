"""
Shared FastAPI dependencies.

Callers are identified by the X-User-Id header set by the upstream auth layer;
every read and write in the API is scoped to that id.
"""
import logging
from typing import Callable, Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.analysis_pipeline import ResumeAnalysisPipeline, build_pipeline
from app.services.job_matcher import JobMatcher
from app.services.llm_gateway import LLMGateway
from app.services.scraper_client import ScraperClient
from app.services.storage import get_storage  # noqa: F401  (re-exported for Depends)

logger = logging.getLogger(__name__)


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=settings.user_id_header),
) -> str:
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request rejected: missing user id header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.user_id_header} header",
        )
    return x_user_id.strip()


def get_pipeline_builder() -> Callable[[Session], ResumeAnalysisPipeline]:
    return build_pipeline


def get_job_matcher() -> JobMatcher:
    return JobMatcher(ScraperClient(), LLMGateway())
