from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import PaginationSettings


@dataclass(frozen=True)
class FilterCriteria:
    """Фильтры каталога в том виде, в каком их ввел пользователь."""

    product_name: Optional[str] = ""
    category: Optional[str] = ""
    min_price: Optional[str] = ""
    max_price: Optional[str] = ""


@dataclass(frozen=True)
class PaginationState:
    """Текущая страница (с нуля) и размер страницы."""

    page_index: int = PaginationSettings.DEFAULT_PAGE_INDEX
    page_size: int = PaginationSettings.DEFAULT_PAGE_SIZE


class Product(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    category: str
    price: float
    stock: int
    description: Optional[str] = None


class ProductsResponse(BaseModel):
    """Страница товаров в формате ответа GET /products."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data: List[Product] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = Field(default=PaginationSettings.DEFAULT_PAGE_SIZE, alias="pageSize")
    total_pages: int = Field(default=0, alias="totalPages")
