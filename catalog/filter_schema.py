from typing import Any, Mapping, Optional
import math

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from .models import FilterCriteria

RANGE_ERROR = "Minimum price must be less than or equal to maximum price"


class FilterSchema(BaseModel):
    """Схема формы фильтров. Все поля необязательны, пустая строка - нет фильтра."""

    model_config = ConfigDict(str_strip_whitespace=True)

    product_name: str = ""
    category: str = ""
    min_price: str = ""
    max_price: str = ""

    @field_validator("product_name", "category", "min_price", "max_price", mode="before")
    @classmethod
    def to_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("min_price", "max_price")
    @classmethod
    def check_price(cls, value: str) -> str:
        if not value:
            return value
        try:
            number = float(value)
        except ValueError:
            raise ValueError("Price must be a number") from None
        if not math.isfinite(number):
            raise ValueError("Price must be a number")
        if number < 0:
            raise ValueError("Price cannot be negative")
        return value

    @field_validator("max_price")
    @classmethod
    def check_range(cls, value: str, info: ValidationInfo) -> str:
        min_price = info.data.get("min_price")
        if value and min_price:
            if float(min_price) > float(value):
                raise ValueError(RANGE_ERROR)
        return value

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria(
            product_name=self.product_name,
            category=self.category,
            min_price=self.min_price,
            max_price=self.max_price,
        )


def validate_filters(
    values: Mapping[str, Any],
) -> tuple[Optional[FilterCriteria], dict[str, str]]:
    """
    Проверяет значения формы.

    :return: (FilterCriteria, {}) при успехе или (None, {поле: сообщение}).
    """
    try:
        schema = FilterSchema.model_validate(dict(values))
    except ValidationError as e:
        return None, _field_errors(e)
    return schema.to_criteria(), {}


def _field_errors(error: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "__root__"
        ctx_error = item.get("ctx", {}).get("error")
        message = str(ctx_error) if ctx_error is not None else item["msg"]
        errors.setdefault(field, message)
    return errors
