from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app.core.deps import get_db
from app.models import LakeBreakdownItem, SpeciesBreakdownItem, UserProfile, UserStats, UserSummary
from app.security import RequestContext, get_request_context, require_context
from app.services import UserService

router = APIRouter()
service = UserService()


def _resolve_user_id(user_id: str, context: RequestContext) -> str:
    if user_id != "me":
        return user_id
    if not context.is_authenticated:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return context.user_id


@router.get("/api/users/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: str,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    target_id = _resolve_user_id(user_id, context)
    user = await service.get_user(db=db, user_id=target_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    # 邮箱只对本人可见
    if target_id != context.user_id:
        user = {**user, "email": None}
    return user


@router.get("/api/users/{user_id}/stats", response_model=UserStats)
async def get_user_stats(
    user_id: str,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    target_id = _resolve_user_id(user_id, context)
    return await service.get_stats(db=db, user_id=target_id)


@router.get("/api/users/{user_id}/species", response_model=List[SpeciesBreakdownItem])
async def get_user_species(
    user_id: str,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    target_id = _resolve_user_id(user_id, context)
    return await service.get_species_breakdown(db=db, user_id=target_id)


@router.get("/api/users/{user_id}/lakes", response_model=List[LakeBreakdownItem])
async def get_user_lakes(
    user_id: str,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    target_id = _resolve_user_id(user_id, context)
    return await service.get_lakes_breakdown(db=db, user_id=target_id)


@router.post("/api/users/{user_id}/follow")
async def follow_user(
    user_id: str,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        found = await service.follow(db=db, follower_id=context.user_id, following_id=user_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not found:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Followed", "following": True}


@router.delete("/api/users/{user_id}/follow")
async def unfollow_user(
    user_id: str,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    await service.unfollow(db=db, follower_id=context.user_id, following_id=user_id)
    return {"message": "Unfollowed", "following": False}


@router.get("/api/users/{user_id}/is-following")
async def is_following(
    user_id: str,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    following = await service.is_following(db=db, follower_id=context.user_id, following_id=user_id)
    return {"following": following}


@router.get("/api/users/{user_id}/followers", response_model=List[UserSummary])
async def list_followers(
    user_id: str,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    target_id = _resolve_user_id(user_id, context)
    return await service.list_followers(db=db, user_id=target_id)


@router.get("/api/users/{user_id}/following", response_model=List[UserSummary])
async def list_following(
    user_id: str,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    target_id = _resolve_user_id(user_id, context)
    return await service.list_following(db=db, user_id=target_id)
