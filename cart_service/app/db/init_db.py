# cart_service/app/db/init_db.py
import logging

from pymongo import ASCENDING

logger = logging.getLogger(__name__)

EMAIL_INDEX_NAME = "carts_email_unique"


async def init_db(collection):
    # Одна корзина на email: уникальность обеспечивает сама база
    await collection.create_index([("email", ASCENDING)], unique=True, name=EMAIL_INDEX_NAME)
    logger.info("Ensured unique index %s on carts", EMAIL_INDEX_NAME)
