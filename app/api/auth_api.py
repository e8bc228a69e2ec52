from fastapi import APIRouter, Depends, HTTPException

from app.core.deps import get_db
from app.models import AuthResponse, UserLogin, UserProfile, UserRegister
from app.security import RequestContext, require_context
from app.services import AuthenticationError, UserService

router = APIRouter()
service = UserService()


@router.post("/api/auth/register", response_model=AuthResponse, status_code=201)
async def register(payload: UserRegister, db=Depends(get_db)):
    try:
        return await service.register(db=db, payload=payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/api/auth/login", response_model=AuthResponse)
async def login(payload: UserLogin, db=Depends(get_db)):
    try:
        return await service.login(db=db, email=payload.email, password=payload.password)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc))


@router.get("/api/auth/user", response_model=UserProfile)
async def get_current_user(context: RequestContext = Depends(require_context), db=Depends(get_db)):
    user = await service.get_user(db=db, user_id=context.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
