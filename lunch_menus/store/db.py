import json
import os
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from lunch_menus.schemas import WeeklyMenu


class MenuStore:
    """SQLite store for restaurants and their weekly menus."""

    def __init__(self, database_path: str):
        self.database_path = database_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def init_db(self):
        """Create tables if they do not exist yet"""
        directory = os.path.dirname(self.database_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS restaurants (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    domain TEXT NOT NULL UNIQUE,
                    full_url TEXT NOT NULL,
                    name TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS daily_menus (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    restaurant_id INTEGER NOT NULL REFERENCES restaurants(id) ON DELETE CASCADE,
                    week_start TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_menus_restaurant_week ON daily_menus(restaurant_id, week_start)"
            )
            conn.commit()

    def upsert_restaurant(self, domain: str, url: str, name: Optional[str] = None) -> int:
        """Return the id of the restaurant with this domain, creating it if needed"""
        with self._connect() as conn:
            row = conn.execute("SELECT id FROM restaurants WHERE domain = ?", (domain,)).fetchone()
            if row:
                return row["id"]
            cursor = conn.execute(
                "INSERT INTO restaurants (domain, full_url, name) VALUES (?, ?, ?)",
                (domain, url, name or domain),
            )
            conn.commit()
            return cursor.lastrowid

    def list_restaurants(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute("SELECT id, domain, full_url, name FROM restaurants ORDER BY id").fetchall()
            return [dict(row) for row in rows]

    def delete_restaurant(self, restaurant_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM restaurants WHERE id = ?", (restaurant_id,))
            conn.commit()
            return cursor.rowcount > 0

    def delete_menus_for_week(self, restaurant_id: int, week_start: str):
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM daily_menus WHERE restaurant_id = ? AND week_start = ?",
                (restaurant_id, week_start),
            )
            conn.commit()

    def insert_menu(self, restaurant_id: int, week_start: str, menu: WeeklyMenu):
        payload = json.dumps(menu.to_document(), ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO daily_menus (restaurant_id, week_start, data) VALUES (?, ?, ?)",
                (restaurant_id, week_start, payload),
            )
            conn.commit()

    def list_menus(self, week_start: str, restaurant_ids: Optional[Sequence[int]] = None) -> List[Dict[str, Any]]:
        """
        Menus stored for a week, newest first, with their restaurant.
        With restaurant_ids, only those restaurants' menus are returned.
        """
        query = """
            SELECT m.id, m.restaurant_id, m.week_start, m.data,
                   r.domain, r.full_url, r.name
            FROM daily_menus m JOIN restaurants r ON r.id = m.restaurant_id
            WHERE m.week_start = ?
        """
        params: List[Any] = [week_start]
        if restaurant_ids is not None:
            if not restaurant_ids:
                return []
            query += f" AND m.restaurant_id IN ({', '.join('?' for _ in restaurant_ids)})"
            params.extend(restaurant_ids)
        query += " ORDER BY m.id DESC"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()

        menus = []
        for row in rows:
            menus.append({
                "id": row["id"],
                "restaurant_id": row["restaurant_id"],
                "week_start": row["week_start"],
                "data": json.loads(row["data"]),
                "restaurant": {"domain": row["domain"], "full_url": row["full_url"], "name": row["name"]},
            })
        return menus

    def get_stats(self) -> dict:
        with self._connect() as conn:
            restaurants = conn.execute("SELECT COUNT(*) FROM restaurants").fetchone()[0]
            menus = conn.execute("SELECT COUNT(*) FROM daily_menus").fetchone()[0]
        return {
            "restaurants": restaurants,
            "menus": menus,
            "database_path": self.database_path,
        }
