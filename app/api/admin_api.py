from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from app.core.deps import get_db
from app.models import RoleUpdate, UserProfile
from app.security import require_role
from app.services import CatchService, UserService
from app.services.catch_export_service import export_filename

router = APIRouter(dependencies=[Depends(require_role("admin"))])
user_service = UserService()
catch_service = CatchService()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/api/admin/users", response_model=List[UserProfile])
async def list_users(db=Depends(get_db)):
    return await user_service.list_users(db=db)


@router.patch("/api/admin/users/{user_id}/role", response_model=UserProfile)
async def update_user_role(user_id: str, payload: RoleUpdate, db=Depends(get_db)):
    try:
        user = await user_service.update_role(db=db, user_id=user_id, role=payload.role)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/api/admin/export")
async def export_catches(db=Depends(get_db)):
    buffer = await catch_service.export_workbook(db=db)
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
