import os
from typing import Dict, Optional

from app.core.concurrency import run_in_thread
from app.logger import logger
from app.repositories import CatchRepository, UserRepository
from app.security import create_access_token, hash_password, verify_password


class AuthenticationError(Exception):
    pass


class UserService:
    @staticmethod
    def _bootstrap_role(email: str) -> str:
        # 首个管理员通过环境变量指定邮箱注册获得
        admin_email = (os.getenv("CATCHLOG_BOOTSTRAP_ADMIN_EMAIL") or "").strip().lower()
        if admin_email and admin_email == (email or "").strip().lower():
            return "admin"
        return "user"

    def _register_sync(self, db, payload: Dict) -> Dict:
        repo = UserRepository(db)
        if repo.exists(email=payload["email"]):
            raise ValueError("Email already in use")
        if repo.exists(username=payload["username"]):
            raise ValueError("Username already taken")
        user = repo.create_user(
            username=payload["username"],
            email=payload["email"],
            password_hash=hash_password(payload["password"]),
            role=self._bootstrap_role(payload["email"]),
            first_name=payload.get("first_name"),
            last_name=payload.get("last_name"),
        )
        logger.info(f"新用户注册: id={user['id']} username={user['username']} role={user['role']}")
        return {
            "message": "Registration successful",
            "token": create_access_token(user["id"], user["role"]),
            "user": user,
        }

    async def register(self, *, db, payload: Dict) -> Dict:
        return await run_in_thread(self._register_sync, db, payload)

    def _login_sync(self, db, email: str, password: str) -> Dict:
        repo = UserRepository(db)
        record = repo.get_user_with_password(email)
        if not record or not verify_password(password, record.pop("password_hash", "")):
            logger.warning(f"登录失败: email={email}")
            raise AuthenticationError("Invalid email or password")
        return {
            "message": "Login successful",
            "token": create_access_token(record["id"], record["role"]),
            "user": record,
        }

    async def login(self, *, db, email: str, password: str) -> Dict:
        return await run_in_thread(self._login_sync, db, email, password)

    async def get_user(self, *, db, user_id: str) -> Optional[Dict]:
        repo = UserRepository(db)
        return await run_in_thread(repo.get_user, user_id)

    def _get_stats_sync(self, db, user_id: str) -> Dict:
        stats = UserRepository(db).get_user_stats(user_id)
        largest_id = stats.pop("largest_catch_id")
        stats["largest_catch"] = CatchRepository(db).get_catch(largest_id) if largest_id else None
        return stats

    async def get_stats(self, *, db, user_id: str) -> Dict:
        return await run_in_thread(self._get_stats_sync, db, user_id)

    async def get_species_breakdown(self, *, db, user_id: str):
        repo = UserRepository(db)
        return await run_in_thread(repo.get_species_breakdown, user_id)

    async def get_lakes_breakdown(self, *, db, user_id: str):
        repo = UserRepository(db)
        return await run_in_thread(repo.get_lakes_breakdown, user_id)

    def _follow_sync(self, db, follower_id: str, following_id: str) -> bool:
        repo = UserRepository(db)
        if not repo.get_user(following_id):
            return False
        repo.follow_user(follower_id, following_id)
        return True

    async def follow(self, *, db, follower_id: str, following_id: str) -> bool:
        return await run_in_thread(self._follow_sync, db, follower_id, following_id)

    async def unfollow(self, *, db, follower_id: str, following_id: str):
        repo = UserRepository(db)
        await run_in_thread(repo.unfollow_user, follower_id, following_id)

    async def is_following(self, *, db, follower_id: str, following_id: str) -> bool:
        repo = UserRepository(db)
        return await run_in_thread(repo.is_following, follower_id, following_id)

    async def list_followers(self, *, db, user_id: str):
        repo = UserRepository(db)
        return await run_in_thread(repo.list_followers, user_id)

    async def list_following(self, *, db, user_id: str):
        repo = UserRepository(db)
        return await run_in_thread(repo.list_following, user_id)

    async def list_users(self, *, db):
        repo = UserRepository(db)
        return await run_in_thread(repo.list_users)

    async def update_role(self, *, db, user_id: str, role: str) -> Optional[Dict]:
        repo = UserRepository(db)
        user = await run_in_thread(repo.update_user_role, user_id, role)
        if user:
            logger.info(f"用户角色变更: id={user_id} role={role}")
        return user
