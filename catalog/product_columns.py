from html import escape
from typing import Iterable, Sequence

import pandas as pd
from babel.numbers import format_currency

from .config import CatalogSettings, CurrencySettings
from .models import Product

OUT_OF_STOCK = "Out of stock"
LOW_STOCK = "Low stock"
IN_STOCK = "In stock"


def stock_status(stock: int) -> str:
    """Статус наличия: 0 - нет, до порога включительно - мало, выше - есть."""
    if stock > CatalogSettings.LOW_STOCK_THRESHOLD:
        return IN_STOCK
    if stock > 0:
        return LOW_STOCK
    return OUT_OF_STOCK


def format_price(
    price: float,
    currency: str = CurrencySettings.CURRENCY,
    locale: str = CurrencySettings.LOCALE,
) -> str:
    return format_currency(price, currency, locale=locale)


def render_product(number: int, product: Product) -> str:
    """HTML-карточка товара для сообщения в Telegram."""
    lines = [f"<b>{number}. {escape(product.name)}</b>"]
    if product.description:
        lines.append(f"<i>{escape(product.description)}</i>")
    lines.append(
        f"🏷 <code>{escape(product.category)}</code>  "
        f"💰 <b>{escape(format_price(product.price))}</b>"
    )
    lines.append(f"📦 {stock_status(product.stock)} · {product.stock} units")
    return "\n".join(lines)


def render_table(products: Sequence[Product], first_number: int = 1) -> str:
    if not products:
        return "No products found."
    return "\n\n".join(
        render_product(number, product)
        for number, product in enumerate(products, start=first_number)
    )


def products_frame(products: Iterable[Product]) -> pd.DataFrame:
    """Таблица товаров страницы для выгрузки."""
    records = [
        {
            "id": product.id,
            "name": product.name,
            "description": product.description or "",
            "category": product.category,
            "price": product.price,
            "stock": product.stock,
            "stock_status": stock_status(product.stock),
        }
        for product in products
    ]
    return pd.DataFrame(
        records,
        columns=["id", "name", "description", "category", "price", "stock", "stock_status"],
    )


def export_csv(products: Iterable[Product]) -> bytes:
    df = products_frame(products)
    return df.to_csv(index=False).encode("utf-8")
