from typing import Dict, Optional

from app.core.concurrency import run_in_thread
from app.logger import logger
from app.repositories import CatchRepository, LakeRepository
from app.services.catch_export_service import catches_to_dataframe, export_catches_to_excel


class CatchService:
    @staticmethod
    def _resolve_lake(db, catch_data: Dict) -> Dict:
        """lake_id 与 lake_name 互相补全；lake_id 指向不存在的水域视为非法输入。"""
        lake_repo = LakeRepository(db)
        lake_id = catch_data.get("lake_id")
        if lake_id is not None:
            lake = lake_repo.get_lake(lake_id)
            if not lake:
                raise ValueError(f"Lake {lake_id} not found")
            if not catch_data.get("lake_name"):
                catch_data["lake_name"] = lake["name"]
        elif catch_data.get("lake_name"):
            lake = lake_repo.get_lake_by_name(catch_data["lake_name"])
            if lake:
                catch_data["lake_id"] = lake["id"]
        return catch_data

    def _create_catch_sync(self, db, user_id: str, catch_data: Dict) -> Dict:
        catch_data = self._resolve_lake(db, dict(catch_data))
        item = CatchRepository(db).create_catch(user_id, catch_data)
        logger.info(
            f"新增渔获: id={item['id']} user={user_id} species={item['species']} size={item.get('size')}"
        )
        return item

    async def create_catch(self, *, db, user_id: str, catch_data: Dict) -> Dict:
        return await run_in_thread(self._create_catch_sync, db, user_id, catch_data)

    async def list_catches(self, *, db, limit: int, offset: int):
        repo = CatchRepository(db)
        return await run_in_thread(repo.list_catches, limit, offset)

    async def list_user_catches(self, *, db, user_id: str, limit: int):
        repo = CatchRepository(db)
        return await run_in_thread(repo.list_user_catches, user_id, limit)

    async def get_catch(self, *, db, catch_id: int) -> Optional[Dict]:
        repo = CatchRepository(db)
        return await run_in_thread(repo.get_catch, catch_id)

    def _update_catch_sync(self, db, context, catch_id: int, changes: Dict) -> Optional[Dict]:
        repo = CatchRepository(db)
        existing = repo.get_catch(catch_id)
        if not existing:
            return None
        if not context.can_modify(existing["user_id"]):
            raise PermissionError("You can only edit your own catches")
        if "lake_id" in changes or "lake_name" in changes:
            changes = self._resolve_lake(db, dict(changes))
        return repo.update_catch(catch_id, changes)

    async def update_catch(self, *, db, context, catch_id: int, changes: Dict) -> Optional[Dict]:
        return await run_in_thread(self._update_catch_sync, db, context, catch_id, changes)

    def _delete_catch_sync(self, db, context, catch_id: int) -> bool:
        repo = CatchRepository(db)
        existing = repo.get_catch(catch_id)
        if not existing:
            return False
        if not context.can_modify(existing["user_id"]):
            raise PermissionError("You can only delete your own catches")
        deleted = repo.delete_catch(catch_id)
        if deleted:
            logger.info(f"删除渔获: id={catch_id} by={context.user_id}")
        return deleted

    async def delete_catch(self, *, db, context, catch_id: int) -> bool:
        return await run_in_thread(self._delete_catch_sync, db, context, catch_id)

    async def verify_catch(self, *, db, catch_id: int) -> Optional[Dict]:
        repo = CatchRepository(db)
        return await run_in_thread(repo.verify_catch, catch_id)

    def _set_like_sync(self, db, user_id: str, catch_id: int, liked: bool) -> Optional[Dict]:
        repo = CatchRepository(db)
        if not repo.get_catch(catch_id):
            return None
        if liked:
            repo.like_catch(user_id, catch_id)
        else:
            repo.unlike_catch(user_id, catch_id)
        return repo.get_like_status(user_id, catch_id)

    async def set_like(self, *, db, user_id: str, catch_id: int, liked: bool) -> Optional[Dict]:
        return await run_in_thread(self._set_like_sync, db, user_id, catch_id, liked)

    async def get_like_status(self, *, db, user_id: Optional[str], catch_id: int) -> Dict:
        repo = CatchRepository(db)
        return await run_in_thread(repo.get_like_status, user_id, catch_id)

    def _export_workbook_sync(self, db):
        rows = CatchRepository(db).list_catches_for_export()
        df = catches_to_dataframe(rows)
        buffer = export_catches_to_excel(df)
        buffer.seek(0)
        logger.info(f"导出渔获: rows={len(df)}")
        return buffer

    async def export_workbook(self, *, db):
        return await run_in_thread(self._export_workbook_sync, db)
