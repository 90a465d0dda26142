from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from planner.models.profile import Profile
from planner.models.user import User

logger = logging.getLogger("planner.auth")


def get_profile(db: Session, user: User) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user.id).first()


def get_or_create_profile(
    db: Session,
    user: User,
    *,
    full_name: Optional[str] = None,
    commit: bool = True,
) -> Profile:
    """Profile of ``user``; a missing row is created on the spot."""
    profile = get_profile(db, user)
    if profile is not None:
        return profile

    profile = Profile(user_id=user.id, email=user.email, full_name=full_name)
    db.add(profile)
    if commit:
        db.commit()
        db.refresh(profile)
    else:
        db.flush()
    logger.info("profile_created", extra={"user_id": user.id, "profile_id": profile.id})
    return profile
