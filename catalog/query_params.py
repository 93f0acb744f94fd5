from dataclasses import dataclass
from typing import Any, Optional, Union

from .models import FilterCriteria, PaginationState

Price = Union[str, int, float]


@dataclass(frozen=True)
class QueryParams:
    """Параметры запроса GET /products. Служат и ключом кэша."""

    page: int
    page_size: int
    product_name: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[Price] = None
    max_price: Optional[Price] = None

    def to_params(self) -> dict[str, Any]:
        """Параметры строки запроса в именах бэкенда, без пустых значений."""
        params: dict[str, Any] = {
            "productName": self.product_name,
            "category": self.category,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "page": self.page,
            "pageSize": self.page_size,
        }
        return {key: value for key, value in params.items() if not is_empty(value)}


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def _present(value: Any) -> Any:
    return None if is_empty(value) else value


def derive_query_params(
    filters: FilterCriteria, pagination: PaginationState
) -> QueryParams:
    """
    Переводит состояние фильтров и пагинации в параметры запроса.

    Бэкенд считает страницы с единицы, поэтому page = page_index + 1.
    Цены передаются как есть, пустые строки и None отбрасываются,
    иначе бэкенд воспримет "" как активный фильтр.
    """
    return QueryParams(
        page=pagination.page_index + 1,
        page_size=pagination.page_size,
        product_name=_present(filters.product_name),
        category=_present(filters.category),
        min_price=_present(filters.min_price),
        max_price=_present(filters.max_price),
    )
