from dataclasses import dataclass, replace
from logging import Logger, getLogger

from .config import PaginationSettings
from .filter_store import FilterStore, filter_store
from .models import PaginationState

logger: Logger = getLogger(__name__)


@dataclass(frozen=True)
class PaginationView:
    current_page: int
    total_pages: int
    start_item: int
    end_item: int
    total_items: int
    page_size: int
    can_go_back: bool
    can_go_forward: bool

    @property
    def summary(self) -> str:
        return (
            f"Showing {self.start_item} to {self.end_item} of {self.total_items} products\n"
            f"Page {self.current_page} of {self.total_pages}"
        )


def item_range(pagination: PaginationState, total: int) -> tuple[int, int]:
    """Номера первого и последнего товара страницы (с единицы)."""
    start = pagination.page_index * pagination.page_size + 1
    end = min((pagination.page_index + 1) * pagination.page_size, total)
    return (start if total > 0 else 0), end


class PaginationControl:
    """Навигация по страницам. Меняет только пагинацию, фильтры не трогает."""

    def __init__(self, store: FilterStore = filter_store) -> None:
        self.store: FilterStore = store

    @property
    def pagination(self) -> PaginationState:
        return self.store.pagination

    def view(self, total_pages: int, total_items: int) -> PaginationView:
        pagination = self.pagination
        start, end = item_range(pagination, total_items)
        return PaginationView(
            current_page=pagination.page_index + 1 if total_pages > 0 else 0,
            total_pages=total_pages,
            start_item=start,
            end_item=end,
            total_items=total_items,
            page_size=pagination.page_size,
            can_go_back=pagination.page_index > 0,
            can_go_forward=pagination.page_index < total_pages - 1,
        )

    def go_to(self, page_index: int) -> None:
        self.store.set_pagination(replace(self.pagination, page_index=page_index))

    def first(self) -> bool:
        if self.pagination.page_index <= 0:
            return False
        self.go_to(0)
        return True

    def previous(self) -> bool:
        if self.pagination.page_index <= 0:
            return False
        self.go_to(self.pagination.page_index - 1)
        return True

    def next(self, total_pages: int) -> bool:
        if self.pagination.page_index >= total_pages - 1:
            return False
        self.go_to(self.pagination.page_index + 1)
        return True

    def last(self, total_pages: int) -> bool:
        if self.pagination.page_index >= total_pages - 1:
            return False
        self.go_to(total_pages - 1)
        return True

    def change_page_size(self, page_size: int) -> None:
        """Новый размер страницы, переход на первую страницу. Фильтры остаются."""
        if page_size not in PaginationSettings.PAGE_SIZE_OPTIONS:
            raise ValueError(f"Unsupported page size: {page_size}")
        logger.debug("Размер страницы: %d", page_size)
        self.store.set_pagination(PaginationState(page_index=0, page_size=page_size))
