"""
Кэширующий слой загрузки товаров поверх ProductsApi.

Ключ кэша - значение QueryParams. Свежая запись (моложе STALE_TIME)
отдается без сети. Записи старше GC_TIME удаляются при следующей загрузке.
Пока грузится новый ключ, на экране остаются прежние данные. Результат
применяется, только если его ключ все еще последний запрошенный: ответы
на вытесненные запросы попадают в кэш, но не на экран.
"""

from dataclasses import dataclass
from logging import Logger, getLogger
from typing import Callable, Optional
import asyncio
import time

from .config import CacheSettings
from .filter_store import FilterStore, filter_store
from .models import Product, ProductsResponse
from .products_api import ProductsApi, ProductsApiError
from .query_params import QueryParams, derive_query_params

logger: Logger = getLogger(__name__)


@dataclass(frozen=True)
class FetchState:
    products: tuple[Product, ...] = ()
    total: int = 0
    total_pages: int = 0
    is_loading: bool = False
    is_fetching: bool = False
    is_error: bool = False
    error: Optional[BaseException] = None
    params: Optional[QueryParams] = None


@dataclass(frozen=True)
class CacheEntry:
    response: ProductsResponse
    fetched_at: float


Listener = Callable[[FetchState], None]


class ProductsQuery:
    def __init__(
        self,
        store: FilterStore = filter_store,
        api: Optional[ProductsApi] = None,
        stale_time: float = CacheSettings.STALE_TIME,
        gc_time: float = CacheSettings.GC_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store: FilterStore = store
        self.api: ProductsApi = api or ProductsApi()
        self.stale_time: float = stale_time
        self.gc_time: float = max(gc_time, stale_time)
        self._clock = clock

        self._cache: dict[QueryParams, CacheEntry] = {}
        self._in_flight: dict[QueryParams, asyncio.Task] = {}
        self._generation: int = 0
        self._latest: Optional[QueryParams] = None
        self._pending: Optional[asyncio.Task] = None

        # последний успешно показанный результат
        self._displayed: Optional[CacheEntry] = None
        self._displayed_params: Optional[QueryParams] = None

        self._listeners: list[Listener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.state: FetchState = FetchState()

    def bind(self) -> "ProductsQuery":
        """Подписывается на хранилище фильтров."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_store_change)
        return self

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def current_params(self) -> QueryParams:
        return derive_query_params(*self.store.snapshot())

    def is_fresh(self, params: QueryParams) -> bool:
        entry = self._cache.get(params)
        return entry is not None and self._clock() - entry.fetched_at < self.stale_time

    def invalidate(self, params: Optional[QueryParams] = None) -> None:
        """Помечает запись (или весь кэш) как устаревшую."""
        if params is None:
            self._cache.clear()
        else:
            self._cache.pop(params, None)

    def request(self, params: QueryParams) -> Optional[asyncio.Task]:
        """
        Делает params последним запрошенным ключом.

        Возвращает задачу загрузки или None, если ответ взят из свежего кэша.
        Должен вызываться внутри работающего event loop.
        """
        self._generation += 1
        self._latest = params
        entry = self._cache.get(params)

        if entry is not None and self.is_fresh(params):
            logger.debug("Ответ для %s взят из кэша", params)
            self._pending = None
            self._show(params, entry)
            return None

        task = self._in_flight.get(params)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._load(params))
            self._in_flight[params] = task
        self._pending = task

        if entry is not None:
            # устаревшие данные этого же ключа видны, пока идет обновление
            self._displayed, self._displayed_params = entry, params
        self._publish(is_loading=entry is None, is_fetching=True)
        return task

    async def refresh(self, force: bool = False) -> FetchState:
        """Загружает текущий ключ хранилища и ждет результата."""
        params = self.current_params
        if force:
            self.invalidate(params)
        self.request(params)
        return await self.wait()

    async def wait(self) -> FetchState:
        """Ждет, пока не завершится загрузка последнего запрошенного ключа."""
        while self._pending is not None:
            generation = self._generation
            task = self._pending
            await asyncio.shield(task)
            if generation == self._generation and self._pending is task:
                break
        return self.state

    async def _load(self, params: QueryParams) -> None:
        try:
            response = await self.api.get_products(params)
        except ProductsApiError as e:
            if params != self._latest:
                logger.debug("Ошибка вытесненного запроса %s проигнорирована", params)
                return
            logger.error("Не удалось загрузить товары: %s", e)
            self._pending = None
            self._displayed, self._displayed_params = None, None
            self._publish(is_error=True, error=e)
            return
        finally:
            self._in_flight.pop(params, None)

        entry = CacheEntry(response=response, fetched_at=self._clock())
        self._prune(entry.fetched_at)
        self._cache[params] = entry
        if params != self._latest:
            logger.debug("Ответ для %s устарел, на экран не попадет", params)
            return
        self._pending = None
        self._show(params, entry)

    def _prune(self, now: float) -> None:
        expired = [
            params
            for params, entry in self._cache.items()
            if now - entry.fetched_at >= self.gc_time
        ]
        for params in expired:
            del self._cache[params]
        if expired:
            logger.debug("Из кэша удалено записей: %d", len(expired))

    def _show(self, params: QueryParams, entry: CacheEntry) -> None:
        self._displayed, self._displayed_params = entry, params
        self._publish()

    def _publish(
        self,
        is_loading: bool = False,
        is_fetching: bool = False,
        is_error: bool = False,
        error: Optional[BaseException] = None,
    ) -> None:
        response = self._displayed.response if self._displayed else None
        self.state = FetchState(
            products=tuple(response.data) if response else (),
            total=response.total if response else 0,
            total_pages=response.total_pages if response else 0,
            is_loading=is_loading,
            is_fetching=is_fetching,
            is_error=is_error,
            error=error,
            params=self._displayed_params,
        )
        for listener in list(self._listeners):
            listener(self.state)

    def _on_store_change(self, store: FilterStore) -> None:
        params = derive_query_params(*store.snapshot())
        if params == self._latest:
            return
        self.request(params)
