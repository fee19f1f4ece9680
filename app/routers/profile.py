from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas.resume import ProfileResponse, ProfileUpdate
from app.services import profile_service

router = APIRouter(prefix="/profile")


@router.get("", response_model=ProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    profile = profile_service.get_profile(db, user_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


@router.put("", response_model=ProfileResponse)
def update_profile(
    update: ProfileUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return profile_service.upsert_profile(db, user_id, **update.model_dump(exclude_unset=True))
