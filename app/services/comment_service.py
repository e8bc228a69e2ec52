from typing import Dict, List, Optional

from app.core.concurrency import run_in_thread
from app.logger import logger
from app.repositories import CatchRepository, CommentRepository


def _clean_content(content) -> str:
    text = str(content or "").strip()
    if not text:
        raise ValueError("Comment content cannot be empty")
    return text


class CommentService:
    def _add_comment_sync(self, db, user_id: str, catch_id: int, content: str) -> Optional[Dict]:
        text = _clean_content(content)
        if not CatchRepository(db).get_catch(catch_id):
            return None
        comment = CommentRepository(db).add_comment(user_id, catch_id, text)
        logger.info(f"新增评论: id={comment['id']} catch={catch_id} user={user_id}")
        return comment

    async def add_comment(self, *, db, user_id: str, catch_id: int, content: str) -> Optional[Dict]:
        return await run_in_thread(self._add_comment_sync, db, user_id, catch_id, content)

    def _list_comments_sync(self, db, catch_id: int) -> Optional[List[Dict]]:
        if not CatchRepository(db).get_catch(catch_id):
            return None
        return CommentRepository(db).list_catch_comments(catch_id)

    async def list_comments(self, *, db, catch_id: int) -> Optional[List[Dict]]:
        return await run_in_thread(self._list_comments_sync, db, catch_id)

    def _update_comment_sync(self, db, context, comment_id: int, content: str) -> Optional[Dict]:
        text = _clean_content(content)
        repo = CommentRepository(db)
        existing = repo.get_comment(comment_id)
        if not existing:
            return None
        if not context.can_modify(existing["user_id"]):
            raise PermissionError("You can only edit your own comments")
        return repo.update_comment(comment_id, text)

    async def update_comment(self, *, db, context, comment_id: int, content: str) -> Optional[Dict]:
        return await run_in_thread(self._update_comment_sync, db, context, comment_id, content)

    def _delete_comment_sync(self, db, context, comment_id: int) -> bool:
        repo = CommentRepository(db)
        existing = repo.get_comment(comment_id)
        if not existing:
            return False
        if not context.can_modify(existing["user_id"]):
            raise PermissionError("You can only delete your own comments")
        deleted = repo.delete_comment(comment_id)
        if deleted:
            logger.info(f"删除评论: id={comment_id} by={context.user_id}")
        return deleted

    async def delete_comment(self, *, db, context, comment_id: int) -> bool:
        return await run_in_thread(self._delete_comment_sync, db, context, comment_id)
