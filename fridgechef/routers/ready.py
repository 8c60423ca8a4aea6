import asyncio
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_object_store
from ..infra.redis_client import get_redis
from ..storage.s3_compat import S3CompatStore

logger = logging.getLogger("fridgechef.ready")

router = APIRouter()


@router.get("/ready")
async def ready(
    db: Session = Depends(get_db),
    store: S3CompatStore = Depends(get_object_store),
):
    """Liveness plus a per-backend report; never fails the liveness check itself."""
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning(f"Database check failed: {e}")

    redis_ok = False
    try:
        r = await get_redis()
        redis_ok = bool(await r.ping())
    except Exception as e:
        logger.warning(f"Redis check failed: {e}")

    storage_ok = False
    try:
        storage_ok = await asyncio.to_thread(store.healthcheck)
    except Exception as e:
        logger.warning(f"Object store check failed: {e}")

    return {"ok": True, "db_ok": db_ok, "redis_ok": redis_ok, "storage_ok": storage_ok}
