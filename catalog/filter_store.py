from logging import Logger, getLogger
from typing import Callable

from .models import FilterCriteria, PaginationState

logger: Logger = getLogger(__name__)

INITIAL_FILTERS = FilterCriteria()
INITIAL_PAGINATION = PaginationState()

Listener = Callable[["FilterStore"], None]


class FilterStore:
    """
    Состояние экрана каталога: фильтры, пагинация и флаг загрузки.

    Хранилище ничего не валидирует, это делает форма до вызова set_filters.
    Подписчики вызываются синхронно после каждого изменения.
    """

    def __init__(self) -> None:
        self.filters: FilterCriteria = INITIAL_FILTERS
        self.pagination: PaginationState = INITIAL_PAGINATION
        self.is_fetching: bool = False
        self._listeners: list[Listener] = []

    def set_filters(self, filters: FilterCriteria) -> None:
        # новые фильтры обнуляют и страницу, и размер страницы
        self.filters = filters
        self.pagination = INITIAL_PAGINATION
        logger.debug("Фильтры изменены: %s", filters)
        self._notify()

    def set_pagination(self, pagination: PaginationState) -> None:
        self.pagination = pagination
        logger.debug("Пагинация изменена: %s", pagination)
        self._notify()

    def reset_filters(self) -> None:
        self.filters = INITIAL_FILTERS
        self.pagination = INITIAL_PAGINATION
        logger.debug("Фильтры сброшены")
        self._notify()

    def set_fetching(self, is_fetching: bool) -> None:
        if self.is_fetching == is_fetching:
            return
        self.is_fetching = is_fetching
        self._notify()

    def snapshot(self) -> tuple[FilterCriteria, PaginationState]:
        return self.filters, self.pagination

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Регистрирует подписчика и возвращает функцию для отписки."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


filter_store = FilterStore()

__all__ = ["FilterStore", "filter_store", "INITIAL_FILTERS", "INITIAL_PAGINATION"]
