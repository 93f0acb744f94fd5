from html import escape
from logging import Logger, getLogger
from typing import Callable, Optional

from .filter_store import FilterStore, filter_store
from .pagination import PaginationControl, PaginationView
from .product_columns import render_table
from .product_filters import ProductFilters
from .products_query import FetchState, ProductsQuery

logger: Logger = getLogger(__name__)

TITLE = "📦 <b>Product Catalog</b>"
ERROR_TITLE = "Error loading products"
UNKNOWN_ERROR = "An unknown error occurred"
LOADING = "⏳ Loading products..."


def error_message(error: Optional[BaseException]) -> str:
    if error is not None and str(error):
        return str(error)
    return UNKNOWN_ERROR


class ProductsPage:
    """
    Экран каталога: форма фильтров, таблица и пагинация над одним запросом.

    Флаг загрузки запроса дублируется в хранилище, чтобы форма знала,
    что поиск еще идет.
    """

    def __init__(
        self,
        store: FilterStore = filter_store,
        query: Optional[ProductsQuery] = None,
    ) -> None:
        self.store: FilterStore = store
        self.query: ProductsQuery = (query or ProductsQuery(store=store)).bind()
        self.filters = ProductFilters(store)
        self.pagination = PaginationControl(store)
        self._unsubscribe: Optional[Callable[[], None]] = self.query.subscribe(
            self._on_fetch_state
        )

    @property
    def state(self) -> FetchState:
        return self.query.state

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.filters.close()
        self.query.close()

    async def load(self) -> FetchState:
        """Загружает текущую страницу (из кэша, если он свежий)."""
        self.query.request(self.query.current_params)
        return await self.query.wait()

    def pagination_view(self) -> Optional[PaginationView]:
        """Состояние пагинации или None, пока на экране ошибка."""
        if self.state.is_error:
            return None
        return self.pagination.view(self.state.total_pages, self.state.total)

    def render(self) -> str:
        state = self.state
        parts = [TITLE]

        filters_line = self._render_filters()
        if filters_line:
            parts.append(filters_line)

        if state.is_error:
            parts.append(
                f"⚠️ <b>{ERROR_TITLE}</b>\n{escape(error_message(state.error))}"
            )
        elif state.is_loading and not state.products:
            parts.append(LOADING)
        else:
            view = self.pagination_view()
            parts.append(render_table(state.products, first_number=self._first_number()))
            parts.append(view.summary)
        return "\n\n".join(parts)

    def _first_number(self) -> int:
        # номера строк считаются по ключу показанных данных, а не по хранилищу
        params = self.state.params
        if params is None:
            return 1
        return (params.page - 1) * params.page_size + 1

    def _render_filters(self) -> str:
        filters = self.store.filters
        labels = [
            ("Name", filters.product_name),
            ("Category", filters.category),
            ("Min price", filters.min_price),
            ("Max price", filters.max_price),
        ]
        active = [f"{label}: <code>{escape(value)}</code>" for label, value in labels if value]
        if not active:
            return ""
        return "🔎 " + " · ".join(active)

    def _on_fetch_state(self, state: FetchState) -> None:
        self.store.set_fetching(state.is_fetching)
