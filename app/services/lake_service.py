from app.core.concurrency import run_in_thread
from app.repositories import LakeRepository


class LakeService:
    async def create_lake(self, *, db, name: str, latitude: float, longitude: float, description=None):
        repo = LakeRepository(db)
        return await run_in_thread(repo.create_lake, name, latitude, longitude, description)

    async def list_lakes(self, *, db):
        repo = LakeRepository(db)
        return await run_in_thread(repo.list_lakes)

    async def get_lake(self, *, db, lake_id: int):
        repo = LakeRepository(db)
        return await run_in_thread(repo.get_lake, lake_id)

    async def search_lakes(self, *, db, latitude: float, longitude: float, radius_km: float):
        repo = LakeRepository(db)
        return await run_in_thread(repo.search_lakes_near, latitude, longitude, radius_km)
