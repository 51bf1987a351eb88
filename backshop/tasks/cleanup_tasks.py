"""Cleanup and maintenance tasks"""

from celery.utils.log import get_task_logger
import asyncio

from backshop.core.celery_app import celery_app
from backshop.core.database import get_db_context
from backshop.services.cart_service import CartService

logger = get_task_logger(__name__)

async def _purge_expired_carts() -> int:
    async with get_db_context() as db:
        return await CartService(db).purge_expired_carts()

@celery_app.task(name="purge_expired_carts")
def purge_expired_carts():
    """Remove carts past their expiry"""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        deleted_count = loop.run_until_complete(_purge_expired_carts())
    except Exception as e:
        logger.error(f"Error purging expired carts: {str(e)}")
        raise
    finally:
        loop.close()

    logger.info(f"Purged {deleted_count} expired carts")
    return {"deleted_count": deleted_count}
