# cart_service/app/db/database.py
import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    db_url: str = field(default_factory=lambda: os.getenv("CART_DB_URL", "mongodb://localhost:27017"))
    db_name: str = field(default_factory=lambda: os.getenv("CART_DB_NAME", "cart_service"))
    collection: str = field(default_factory=lambda: os.getenv("CART_COLLECTION", "carts"))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CART_CORS_ORIGINS", "*")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    host: str = field(default_factory=lambda: os.getenv("CART_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("CART_PORT", "8003")))


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# Клиент создаётся один раз на приложение и живёт до его остановки
def create_client(settings: Settings) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(settings.db_url)


def get_collection(client, settings: Settings) -> AsyncIOMotorCollection:
    return client[settings.db_name][settings.collection]


# Зависимость FastAPI: коллекция корзин, подготовленная в lifespan
async def get_db(request: Request) -> AsyncIOMotorCollection:
    return request.app.state.carts
