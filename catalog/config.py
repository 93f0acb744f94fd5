import os

from dotenv import load_dotenv

load_dotenv()


def _split_ids(raw: str | None) -> list[int]:
    if not raw:
        return []
    return [int(chat_id) for chat_id in raw.split(",") if chat_id.strip()]


class APIConfig:
    API_URL: str = os.getenv("API_URL") or "http://localhost:8080/api"
    REQUEST_TIMEOUT: int = 30


class BotConfig:
    TOKEN: str | None = os.getenv("token")
    ADMIN_IDS: list[int] = _split_ids(os.getenv("ADMIN_IDS"))


class LogSettings:
    LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    FILENAME: str | None = os.getenv("LOG_FILE")


class PaginationSettings:
    DEFAULT_PAGE_INDEX: int = 0
    DEFAULT_PAGE_SIZE: int = 10
    PAGE_SIZE_OPTIONS: tuple[int, ...] = (5, 10, 20, 50, 100)


class CacheSettings:
    # секунды
    STALE_TIME: int = 5 * 60
    # столько живет запись после загрузки, потом удаляется из кэша
    GC_TIME: int = 10 * 60


class CurrencySettings:
    LOCALE: str = "pt_BR"
    CURRENCY: str = "BRL"


class CatalogSettings:
    CATEGORIES: list[str] = [
        "Eletrônicos",
        "Roupas",
        "Livros",
        "Esportes",
        "Casa e Decoração",
    ]
    LOW_STOCK_THRESHOLD: int = 10
