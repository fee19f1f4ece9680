import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.profile import Profile

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("email", "full_name", "avatar_url")


def get_profile(db: Session, user_id: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def upsert_profile(db: Session, user_id: str, **fields) -> Profile:
    """Create the cached profile on first sight; afterwards only overwrite the fields given."""
    profile = get_profile(db, user_id)
    if profile is None:
        profile = Profile(user_id=user_id)
        db.add(profile)
        logger.info(f"Creating profile for user {user_id}")

    for field in PROFILE_FIELDS:
        if field in fields:
            setattr(profile, field, fields[field])

    try:
        db.commit()
        db.refresh(profile)
    except Exception:
        db.rollback()
        raise
    return profile
