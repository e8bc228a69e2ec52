from .catch_service import CatchService
from .comment_service import CommentService
from .lake_service import LakeService
from .leaderboard_service import LeaderboardService, LeaderboardValidationError
from .user_service import AuthenticationError, UserService
from .catch_export_service import catches_to_dataframe, export_catches_to_excel

__all__ = [
    "CatchService",
    "CommentService",
    "LakeService",
    "LeaderboardService",
    "LeaderboardValidationError",
    "UserService",
    "AuthenticationError",
    "catches_to_dataframe",
    "export_catches_to_excel",
]
