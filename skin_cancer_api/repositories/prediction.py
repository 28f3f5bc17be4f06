import logging

import asyncpg

from skin_cancer_api.services.errors import StoreError

log = logging.getLogger("skin_cancer_api")


class PredictionRepository:
    def __init__(self, pool: asyncpg.Pool, table: str = "predictions"):
        self.pool = pool
        self.table = table

    async def init(self) -> None:
        """Создание таблицы, если не существует"""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id TEXT PRIMARY KEY,
                    result TEXT NOT NULL,
                    suggestion TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    image_key TEXT
                )
                """
            )

    async def upsert(self, record: dict, image_key: str | None = None) -> None:
        query = f"""
        INSERT INTO {self.table} (id, result, suggestion, created_at, image_key)
        VALUES ($1, $2, $3, $4, $5)
        ON CONFLICT (id) DO UPDATE
        SET result = EXCLUDED.result,
            suggestion = EXCLUDED.suggestion,
            created_at = EXCLUDED.created_at,
            image_key = EXCLUDED.image_key
        """
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    query,
                    record["id"],
                    record["result"],
                    record["suggestion"],
                    record["createdAt"],
                    image_key,
                )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            log.error(f"❌ Failed to save prediction {record['id']}: {e}", exc_info=True)
            raise StoreError(f"Failed to save prediction: {e}") from e
        log.info(f"✅ Prediction saved: id={record['id']}")

    async def get(self, prediction_id: str) -> dict | None:
        query = f"""
        SELECT id, result, suggestion, created_at, image_key
        FROM {self.table}
        WHERE id = $1
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, prediction_id)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StoreError(f"Failed to read prediction: {e}") from e
        if not row:
            return None
        return {
            "id": row["id"],
            "result": row["result"],
            "suggestion": row["suggestion"],
            "createdAt": row["created_at"],
            "image_key": row["image_key"],
        }


def make_prediction_repository(pool: asyncpg.Pool) -> PredictionRepository:
    return PredictionRepository(pool)
