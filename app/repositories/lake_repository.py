import math
from typing import Dict, List, Optional

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


class LakeRepository:
    def __init__(self, db):
        self.db = db

    def create_lake(self, name: str, latitude: float, longitude: float, description: Optional[str] = None) -> Dict:
        normalized_name = (name or "").strip()
        if not normalized_name:
            raise ValueError("lake name 不能为空")

        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO lakes (name, latitude, longitude, description)
            VALUES (?, ?, ?, ?)
            """,
            (normalized_name, float(latitude), float(longitude), description),
        )
        lake_id = cursor.lastrowid
        conn.commit()
        conn.close()
        return self.get_lake(lake_id)

    def get_lake(self, lake_id: int) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, name, latitude, longitude, description, created_at FROM lakes WHERE id = ?",
            (int(lake_id),),
        )
        row = cursor.fetchone()
        conn.close()
        return dict(row) if row else None

    def get_lake_by_name(self, name: str) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT id, name, latitude, longitude, description, created_at
            FROM lakes
            WHERE name = ? COLLATE NOCASE
            ORDER BY id ASC
            LIMIT 1
            """,
            ((name or "").strip(),),
        )
        row = cursor.fetchone()
        conn.close()
        return dict(row) if row else None

    def list_lakes(self) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, name, latitude, longitude, description, created_at FROM lakes ORDER BY name ASC, id ASC"
        )
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]

    def search_lakes_near(self, latitude: float, longitude: float, radius_km: float) -> List[Dict]:
        # 湖泊数量有限，全量读取后在内存中按球面距离过滤
        matched = []
        for lake in self.list_lakes():
            distance = haversine_km(latitude, longitude, lake["latitude"], lake["longitude"])
            if distance <= radius_km:
                matched.append({**lake, "distance_km": round(distance, 3)})
        matched.sort(key=lambda x: (x["distance_km"], x["id"]))
        return matched
