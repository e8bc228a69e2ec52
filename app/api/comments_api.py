from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app.core.deps import get_db
from app.models import CommentCreate, CommentItem
from app.security import RequestContext, require_context
from app.services import CommentService

router = APIRouter()
service = CommentService()


@router.post("/api/catches/{catch_id}/comments", response_model=CommentItem, status_code=201)
async def add_comment(
    catch_id: int,
    payload: CommentCreate,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        comment = await service.add_comment(
            db=db, user_id=context.user_id, catch_id=catch_id, content=payload.content
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if comment is None:
        raise HTTPException(status_code=404, detail="Catch not found")
    return comment


@router.get("/api/catches/{catch_id}/comments", response_model=List[CommentItem])
async def list_comments(
    catch_id: int,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    comments = await service.list_comments(db=db, catch_id=catch_id)
    if comments is None:
        raise HTTPException(status_code=404, detail="Catch not found")
    return comments


@router.put("/api/comments/{comment_id}", response_model=CommentItem)
async def update_comment(
    comment_id: int,
    payload: CommentCreate,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        comment = await service.update_comment(
            db=db, context=context, comment_id=comment_id, content=payload.content
        )
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.delete("/api/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    context: RequestContext = Depends(require_context),
    db=Depends(get_db),
):
    try:
        deleted = await service.delete_comment(db=db, context=context, comment_id=comment_id)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    if not deleted:
        raise HTTPException(status_code=404, detail="Comment not found")
    return {"message": "Comment deleted successfully", "id": comment_id}
