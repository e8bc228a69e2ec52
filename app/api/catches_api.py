from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.deps import get_db
from app.models import CatchCreate, CatchItem, CatchUpdate, LikeStatus
from app.security import RequestContext, get_request_context, require_context, require_role
from app.services import CatchService

router = APIRouter()
service = CatchService()


@router.post("/api/catches", response_model=CatchItem, status_code=201)
async def create_catch(
    payload: CatchCreate,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        return await service.create_catch(
            db=db, user_id=context.user_id, catch_data=payload.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/api/catches", response_model=List[CatchItem])
async def list_catches(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db=Depends(get_db),
):
    return await service.list_catches(db=db, limit=limit, offset=offset)


@router.get("/api/catches/{catch_id}", response_model=CatchItem)
async def get_catch(catch_id: int, db=Depends(get_db)):
    item = await service.get_catch(db=db, catch_id=catch_id)
    if not item:
        raise HTTPException(status_code=404, detail="Catch not found")
    return item


@router.put("/api/catches/{catch_id}", response_model=CatchItem)
async def update_catch(
    catch_id: int,
    payload: CatchUpdate,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        item = await service.update_catch(
            db=db, context=context, catch_id=catch_id, changes=payload.model_dump(exclude_unset=True)
        )
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not item:
        raise HTTPException(status_code=404, detail="Catch not found")
    return item


@router.delete("/api/catches/{catch_id}")
async def delete_catch(
    catch_id: int,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        deleted = await service.delete_catch(db=db, context=context, catch_id=catch_id)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    if not deleted:
        raise HTTPException(status_code=404, detail="Catch not found")
    return {"message": "Catch deleted", "id": catch_id}


@router.post("/api/catches/{catch_id}/verify", response_model=CatchItem)
async def verify_catch(
    catch_id: int,
    context: RequestContext = Depends(require_role("moderator", "admin")),
    db=Depends(get_db),
):
    item = await service.verify_catch(db=db, catch_id=catch_id)
    if not item:
        raise HTTPException(status_code=404, detail="Catch not found")
    return item


@router.post("/api/catches/{catch_id}/like", response_model=LikeStatus)
async def like_catch(
    catch_id: int,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    status = await service.set_like(db=db, user_id=context.user_id, catch_id=catch_id, liked=True)
    if status is None:
        raise HTTPException(status_code=404, detail="Catch not found")
    return status


@router.delete("/api/catches/{catch_id}/like", response_model=LikeStatus)
async def unlike_catch(
    catch_id: int,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    status = await service.set_like(db=db, user_id=context.user_id, catch_id=catch_id, liked=False)
    if status is None:
        raise HTTPException(status_code=404, detail="Catch not found")
    return status


@router.get("/api/catches/{catch_id}/like", response_model=LikeStatus)
async def get_like_status(
    catch_id: int,
    context: RequestContext = Depends(get_request_context),
    db=Depends(get_db),
):
    return await service.get_like_status(db=db, user_id=context.user_id, catch_id=catch_id)


@router.get("/api/users/{user_id}/catches", response_model=List[CatchItem])
async def list_user_catches(
    user_id: str,
    limit: int = Query(10, ge=1, le=100),
    db=Depends(get_db),
):
    return await service.list_user_catches(db=db, user_id=user_id, limit=limit)
