# planner/profile/profile_router.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from planner.auth.auth_router import get_current_user
from planner.database import get_db
from planner.models.profile import Profile
from planner.models.user import User
from planner.profile.profile_service import get_or_create_profile
from planner.schemas.profile_schema import ProfileRead, ProfileUpdate

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_current_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    return get_or_create_profile(db, user)


@router.get("/", response_model=list[ProfileRead])
def list_profiles(
    _: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    # every signed-in user may see every profile (assignee picker)
    return db.query(Profile).order_by(Profile.id).all()


@router.get("/me", response_model=ProfileRead)
def read_my_profile(profile: Profile = Depends(get_current_profile)):
    return profile


@router.patch("/me", response_model=ProfileRead)
def update_my_profile(
    data: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    if data.full_name is not None:
        profile.full_name = data.full_name
    if data.avatar_url is not None:
        profile.avatar_url = data.avatar_url

    db.commit()
    db.refresh(profile)
    return profile
