from dataclasses import asdict
from logging import Logger, getLogger
from typing import Any, Callable, Mapping, Optional

from .filter_schema import validate_filters
from .filter_store import FilterStore, INITIAL_FILTERS, filter_store
from .models import FilterCriteria

logger: Logger = getLogger(__name__)

FIELDS: tuple[str, ...] = ("product_name", "category", "min_price", "max_price")


class ProductFilters:
    """
    Форма фильтров.

    Держит локальные значения полей и ошибки валидации. В хранилище
    попадают только прошедшие проверку значения. Когда фильтры в хранилище
    меняются (например, после сброса), локальные значения подтягиваются.
    """

    def __init__(self, store: FilterStore = filter_store) -> None:
        self.store: FilterStore = store
        self.values: dict[str, str] = self._as_values(store.filters)
        self.errors: dict[str, str] = {}
        self._synced: FilterCriteria = store.filters
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(self._sync)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def is_busy(self) -> bool:
        return self.store.is_fetching

    def update(self, **fields: Any) -> None:
        """Меняет значения полей без отправки формы."""
        for name, value in fields.items():
            if name not in FIELDS:
                raise KeyError(f"Unknown filter field: {name}")
            self.values[name] = "" if value is None else str(value)

    def submit(self, values: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Проверяет форму и применяет фильтры.

        :return: True, если фильтры записаны в хранилище.
        """
        if values:
            self.update(**values)
        if self.is_busy:
            logger.info("Поиск уже выполняется, отправка формы пропущена")
            return False

        criteria, errors = validate_filters(self.values)
        self.errors = errors
        if criteria is None:
            logger.info("Форма фильтров не прошла проверку: %s", errors)
            return False

        self.store.set_filters(criteria)
        return True

    def clear(self) -> None:
        self.values = self._as_values(INITIAL_FILTERS)
        self.errors = {}
        self.store.reset_filters()

    def _sync(self, store: FilterStore) -> None:
        if store.filters is self._synced:
            return
        self._synced = store.filters
        self.values = self._as_values(store.filters)

    @staticmethod
    def _as_values(filters: FilterCriteria) -> dict[str, str]:
        return {name: value or "" for name, value in asdict(filters).items()}
