from logging import Logger, getLogger
from typing import Any, Mapping, Optional
import asyncio

import aiohttp
from pydantic import ValidationError

from .config import APIConfig
from .models import ProductsResponse
from .query_params import QueryParams, is_empty

logger: Logger = getLogger(__name__)


class CatalogError(Exception):
    """Базовая ошибка каталога."""


class ProductsApiError(CatalogError):
    """Ошибка обращения к API товаров. Текст пригоден для показа пользователю."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.status: Optional[int] = status


def clean_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Убирает пустые строки и None перед отправкой."""
    return {key: value for key, value in params.items() if not is_empty(value)}


class ProductsApi:
    def __init__(
        self,
        base_url: str = APIConfig.API_URL,
        timeout: int = APIConfig.REQUEST_TIMEOUT,
    ) -> None:
        self.base_url: str = base_url.rstrip("/")
        self.timeout: int = timeout

    async def get_products(self, params: QueryParams) -> ProductsResponse:
        """Страница товаров для заданных параметров."""
        query = clean_params(params.to_params())
        payload = await self._get_json("/products", query)
        try:
            response = ProductsResponse.model_validate(payload)
        except ValidationError as e:
            logger.error("Некорректный ответ /products: %s", e)
            raise ProductsApiError("Invalid response from the products API") from e
        logger.info(
            "Получено %d из %d товаров (страница %d из %d)",
            len(response.data),
            response.total,
            response.page,
            response.total_pages,
        )
        return response

    async def get_categories(self) -> list[str]:
        payload = await self._get_json("/categories")
        categories = payload.get("categories") if isinstance(payload, dict) else None
        if not isinstance(categories, list):
            raise ProductsApiError("Invalid response from the categories API")
        return [str(category) for category in categories]

    async def health_check(self) -> bool:
        """True, если API и его база данных доступны."""
        try:
            payload = await self._get_json("/health")
        except ProductsApiError as e:
            logger.warning("API недоступен: %s", e)
            return False
        return isinstance(payload, dict) and payload.get("status") == "ok"

    async def _get_json(
        self, path: str, params: Optional[dict[str, Any]] = None
    ) -> Any:
        url: str = f"{self.base_url}{path}"
        # aiohttp принимает в params только str/int/float
        query = {key: str(value) for key, value in (params or {}).items()}
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            try:
                async with session.get(url=url, params=query) as response:
                    logger.debug("GET %s %s -> %d", url, query, response.status)
                    if response.status >= 400:
                        message = await self._error_message(response)
                        logger.error(
                            "Ошибка HTTP %d при запросе %s: %s",
                            response.status,
                            url,
                            message,
                        )
                        raise ProductsApiError(message, status=response.status)
                    return await response.json(content_type=None)

            except aiohttp.ClientError as e:
                logger.error("Ошибка соединения с %s: %s", url, str(e))
                raise ProductsApiError(f"Network error: {e}") from e

            except asyncio.TimeoutError as e:
                logger.error("Тайм-аут при запросе %s", url)
                raise ProductsApiError("Request timed out") from e

            except ValueError as e:
                logger.error("Ошибка декодирования JSON от %s: %s", url, e)
                raise ProductsApiError("Invalid JSON in API response") from e

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        fallback = f"Request failed with status code {response.status}"
        try:
            body = await response.json(content_type=None)
        except ValueError:
            return fallback
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or fallback)
        return fallback
