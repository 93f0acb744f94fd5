import asyncio
from unittest.mock import AsyncMock

import pytest
from aiogram.filters import CommandObject

from catalog.config import BotConfig
from catalog.filter_store import INITIAL_FILTERS, FilterStore
from catalog.models import PaginationState, Product, ProductsResponse
from catalog.products_api import ProductsApiError
from catalog.products_page import ProductsPage
from catalog.products_query import ProductsQuery
from catalog.query_params import QueryParams
from telegram_bot.handlers import products as handlers


class StubApi:
    def __init__(self, total: int = 25) -> None:
        self.total = total
        self.error: Exception | None = None
        self.calls: list[QueryParams] = []

    async def get_products(self, params: QueryParams) -> ProductsResponse:
        self.calls.append(params)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        first = (params.page - 1) * params.page_size
        count = max(0, min(params.page_size, self.total - first))
        return ProductsResponse(
            data=[
                Product(id=str(first + n), name=f"Item {first + n}", category="Livros",
                        price=10.0, stock=first + n)
                for n in range(1, count + 1)
            ],
            total=self.total,
            page=params.page,
            pageSize=params.page_size,
            totalPages=(self.total + params.page_size - 1) // params.page_size,
        )

    async def get_categories(self) -> list[str]:
        return ["Livros", "Roupas"]


@pytest.fixture
def api():
    return StubApi()


@pytest.fixture
def page(monkeypatch, api):
    store = FilterStore()
    page = ProductsPage(store=store, query=ProductsQuery(store=store, api=api))
    monkeypatch.setattr(handlers, "_page", page)
    monkeypatch.setattr(handlers, "_categories", ["Livros", "Roupas"])
    yield page
    page.close()


def make_callback(data: str) -> AsyncMock:
    callback = AsyncMock()
    callback.data = data
    return callback


def filter_command(args: str) -> CommandObject:
    return CommandObject(prefix="/", command="filter", args=args)


def last_text(mock: AsyncMock) -> str:
    return mock.await_args.args[0]


@pytest.mark.asyncio
async def test_filter_escapes_unknown_token(page):
    message = AsyncMock()

    await handlers.filter_cmd(message, filter_command("a<b"))

    text = last_text(message.answer)
    assert "Unknown filter: a&lt;b" in text
    assert "a<b" not in text
    assert message.answer.await_args.kwargs["parse_mode"] == "HTML"


@pytest.mark.asyncio
async def test_filter_applies_and_sends_page(page, api):
    message = AsyncMock()

    await handlers.filter_cmd(message, filter_command("category=Livros min=5"))

    assert page.store.filters.category == "Livros"
    assert api.calls[-1] == QueryParams(page=1, page_size=10, category="Livros", min_price="5")
    assert "Category: <code>Livros</code>" in last_text(message.answer)
    assert message.answer.await_args.kwargs["reply_markup"] is not None


@pytest.mark.asyncio
async def test_filter_reports_field_errors(page, api):
    message = AsyncMock()

    await handlers.filter_cmd(message, filter_command("min=abc"))

    assert "Min price: Price must be a number" in last_text(message.answer)
    assert page.store.filters == INITIAL_FILTERS
    assert api.calls == []


@pytest.mark.asyncio
async def test_category_after_invalid_filter_shows_errors(page):
    assert page.filters.submit({"min_price": "abc"}) is False
    callback = make_callback("cat:0")

    await handlers.category_callback(callback)

    assert last_text(callback.answer) == "❌ Invalid filters"
    assert "Min price: Price must be a number" in last_text(callback.message.answer)
    assert page.store.filters.category == ""


@pytest.mark.asyncio
async def test_category_refused_while_fetching(page):
    await page.load()
    page.store.set_fetching(True)
    callback = make_callback("cat:1")

    await handlers.category_callback(callback)

    assert "Search in progress" in last_text(callback.answer)
    assert page.store.filters.category == ""


@pytest.mark.asyncio
async def test_category_applied(page, api):
    callback = make_callback("cat:1")

    await handlers.category_callback(callback)

    assert page.store.filters.category == "Roupas"
    assert api.calls[-1].category == "Roupas"
    assert "Category: <code>Roupas</code>" in last_text(callback.message.answer)


@pytest.mark.asyncio
async def test_unknown_category_index(page):
    callback = make_callback("cat:9")

    await handlers.category_callback(callback)

    assert last_text(callback.answer) == "Unknown category"


@pytest.mark.asyncio
async def test_page_next_edits_message(page):
    await page.load()
    callback = make_callback("page:next")

    await handlers.page_callback(callback)

    assert page.store.pagination.page_index == 1
    text = last_text(callback.message.edit_text)
    assert "<b>11. Item 11</b>" in text
    assert "Page 2 of 3" in text


@pytest.mark.asyncio
async def test_page_previous_on_first_page_does_nothing(page, api):
    await page.load()
    callback = make_callback("page:previous")

    await handlers.page_callback(callback)

    callback.answer.assert_awaited_once_with()
    callback.message.edit_text.assert_not_awaited()
    assert len(api.calls) == 1


@pytest.mark.asyncio
async def test_size_callback_changes_page_size(page, api):
    page.filters.submit({"category": "Livros"})
    callback = make_callback("size:20")

    await handlers.size_callback(callback)

    assert page.store.pagination == PaginationState(page_index=0, page_size=20)
    assert page.store.filters.category == "Livros"
    assert api.calls[-1].page_size == 20
    callback.message.edit_text.assert_awaited()


@pytest.mark.asyncio
async def test_size_callback_rejects_unknown_size(page):
    callback = make_callback("size:7")

    await handlers.size_callback(callback)

    assert last_text(callback.answer) == "Unsupported page size"
    assert page.store.pagination.page_size == 10


@pytest.mark.asyncio
async def test_clear_callback_resets_filters(page):
    page.filters.submit({"category": "Livros", "max_price": "50"})
    callback = make_callback("clear")

    await handlers.clear_callback(callback)

    assert page.store.filters == INITIAL_FILTERS
    assert page.filters.values["max_price"] == ""
    assert "Category:" not in last_text(callback.message.edit_text)


@pytest.mark.asyncio
async def test_retry_after_error(page, api):
    api.error = ProductsApiError("Erro ao buscar produtos")
    await page.load()
    assert page.state.is_error

    api.error = None
    callback = make_callback("retry")
    await handlers.retry_callback(callback)

    text = last_text(callback.message.edit_text)
    assert "Error loading products" not in text
    assert "<b>1. Item 1</b>" in text


@pytest.mark.asyncio
async def test_export_sends_csv(page):
    message = AsyncMock()

    await handlers.export_cmd(message)

    document = message.answer_document.await_args.args[0]
    assert document.filename == "products_page_1.csv"
    assert message.answer_document.await_args.kwargs["caption"] == "10 products"


@pytest.mark.asyncio
async def test_export_on_error(page, api):
    api.error = ProductsApiError("boom")
    message = AsyncMock()

    await handlers.export_cmd(message)

    assert "Nothing to export" in last_text(message.answer)
    message.answer_document.assert_not_awaited()


def test_chat_allowed(monkeypatch):
    monkeypatch.setattr(BotConfig, "ADMIN_IDS", [42])
    assert handlers.chat_allowed(42) is True
    assert handlers.chat_allowed(7) is False

    monkeypatch.setattr(BotConfig, "ADMIN_IDS", [])
    assert handlers.chat_allowed(7) is True
