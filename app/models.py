from pydantic import BaseModel, Field
from typing import Optional, Any, Dict, Union


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=40)
    email: str
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserLogin(BaseModel):
    email: str
    password: str


class UserSummary(BaseModel):
    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class UserProfile(UserSummary):
    email: Optional[str] = None
    bio: Optional[str] = None
    role: str = "user"
    created_at: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserProfile


class RoleUpdate(BaseModel):
    role: str


class CatchCreate(BaseModel):
    species: str = Field(..., min_length=1)
    size: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    lake_id: Optional[int] = None
    lake_name: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    temperature: Optional[float] = None
    depth: Optional[float] = Field(None, ge=0)
    lure: Optional[str] = None
    comments: Optional[str] = None
    weather_data: Optional[Dict[str, Any]] = None
    catch_date: Optional[str] = None


class CatchUpdate(BaseModel):
    species: Optional[str] = Field(None, min_length=1)
    size: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    lake_id: Optional[int] = None
    lake_name: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    temperature: Optional[float] = None
    depth: Optional[float] = Field(None, ge=0)
    lure: Optional[str] = None
    comments: Optional[str] = None
    weather_data: Optional[Dict[str, Any]] = None
    catch_date: Optional[str] = None


class CatchItem(BaseModel):
    id: int
    user_id: str
    species: str
    size: Optional[float] = None
    weight: Optional[float] = None
    lake_id: Optional[int] = None
    lake_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    temperature: Optional[float] = None
    depth: Optional[float] = None
    lure: Optional[str] = None
    comments: Optional[str] = None
    weather_data: Optional[Dict[str, Any]] = None
    catch_date: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user: Optional[UserSummary] = None


class CommentCreate(BaseModel):
    content: str


class CommentItem(BaseModel):
    id: int
    catch_id: int
    user_id: str
    content: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user: Optional[UserSummary] = None


class LakeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    description: Optional[str] = None


class LakeItem(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    description: Optional[str] = None
    created_at: Optional[str] = None
    distance_km: Optional[float] = None


class CatchSnapshot(BaseModel):
    catch_id: int
    species: str
    size: float
    weight: Optional[float] = None
    catch_date: Optional[str] = None


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: str
    profile_image_url: Optional[str] = None
    metric_value: Union[int, CatchSnapshot]


class UserStats(BaseModel):
    total_catches: int
    unique_species: int
    total_likes: int
    largest_catch: Optional[CatchItem] = None


class SpeciesBreakdownItem(BaseModel):
    species: str
    count: int


class LakeBreakdownItem(BaseModel):
    lake: str
    count: int


class LikeStatus(BaseModel):
    catch_id: int
    liked: bool
    likes: int

