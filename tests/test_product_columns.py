import io

import pandas as pd
import pytest

from catalog.models import Product
from catalog.product_columns import (
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    export_csv,
    format_price,
    products_frame,
    render_table,
    stock_status,
)


@pytest.fixture
def products():
    return [
        Product(id="a1", name="Smart TV", category="Eletrônicos", price=2499.9, stock=3,
                description="55 <polegadas>"),
        Product(id="b2", name="Livro", category="Livros", price=39.5, stock=0),
    ]


@pytest.mark.parametrize(
    "stock, expected",
    [(0, OUT_OF_STOCK), (5, LOW_STOCK), (10, LOW_STOCK), (11, IN_STOCK), (1, LOW_STOCK)],
)
def test_stock_status(stock, expected):
    assert stock_status(stock) == expected


def test_stock_labels():
    assert (OUT_OF_STOCK, LOW_STOCK, IN_STOCK) == ("Out of stock", "Low stock", "In stock")


def test_format_price_uses_locale():
    formatted = format_price(1234.5)

    assert "R$" in formatted
    assert "1.234,50" in formatted


def test_format_price_other_locale():
    assert format_price(1234.5, currency="USD", locale="en_US") == "$1,234.50"


def test_render_table_escapes_and_numbers_rows(products):
    text = render_table(products, first_number=21)

    assert "<b>21. Smart TV</b>" in text
    assert "<b>22. Livro</b>" in text
    assert "55 &lt;polegadas&gt;" in text
    assert "Out of stock" in text
    assert "Low stock · 3 units" in text


def test_render_table_empty():
    assert render_table([]) == "No products found."


def test_products_frame(products):
    df = products_frame(products)

    assert list(df["name"]) == ["Smart TV", "Livro"]
    assert list(df["stock_status"]) == [LOW_STOCK, OUT_OF_STOCK]
    assert df.loc[1, "description"] == ""


def test_products_frame_empty_keeps_columns():
    df = products_frame([])

    assert df.empty
    assert "stock_status" in df.columns


def test_export_csv(products):
    df = pd.read_csv(io.BytesIO(export_csv(products)))

    assert list(df["id"]) == ["a1", "b2"]
    assert list(df["price"]) == [2499.9, 39.5]
