from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.deps import get_db
from app.models import LakeCreate, LakeItem
from app.security import require_context
from app.services import LakeService

router = APIRouter()
service = LakeService()


@router.post("/api/lakes", response_model=LakeItem, status_code=201, dependencies=[Depends(require_context)])
async def create_lake(payload: LakeCreate, db=Depends(get_db)):
    try:
        return await service.create_lake(
            db=db,
            name=payload.name,
            latitude=payload.latitude,
            longitude=payload.longitude,
            description=payload.description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/api/lakes", response_model=List[LakeItem])
async def list_lakes(db=Depends(get_db)):
    return await service.list_lakes(db=db)


# 需在 /api/lakes/{lake_id} 之前注册
@router.get("/api/lakes/search", response_model=List[LakeItem])
async def search_lakes(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(50.0, gt=0, le=20000),
    db=Depends(get_db),
):
    return await service.search_lakes(db=db, latitude=lat, longitude=lng, radius_km=radius_km)


@router.get("/api/lakes/{lake_id}", response_model=LakeItem)
async def get_lake(lake_id: int, db=Depends(get_db)):
    lake = await service.get_lake(db=db, lake_id=lake_id)
    if not lake:
        raise HTTPException(status_code=404, detail="Lake not found")
    return lake
