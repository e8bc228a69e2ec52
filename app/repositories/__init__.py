from .catch_repository import CatchRepository
from .comment_repository import CommentRepository
from .lake_repository import LakeRepository
from .leaderboard_repository import LeaderboardRepository
from .user_repository import UserRepository

__all__ = [
    "CatchRepository",
    "CommentRepository",
    "LakeRepository",
    "LeaderboardRepository",
    "UserRepository",
]
