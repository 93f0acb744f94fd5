from html import escape
from logging import Logger, getLogger
import shlex

from aiogram import F, Router, types
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject, CommandStart, or_f
from aiogram.types import BufferedInputFile

from catalog.config import BotConfig, CatalogSettings
from catalog.product_columns import export_csv
from catalog.products_api import ProductsApiError
from catalog.products_page import ProductsPage
from telegram_bot.ui import categories_keyboard, page_keyboard, split_message

logger: Logger = getLogger(__name__)

catalog_router = Router()


def chat_allowed(chat_id: int) -> bool:
    """Пустой ADMIN_IDS пускает всех."""
    return not BotConfig.ADMIN_IDS or chat_id in BotConfig.ADMIN_IDS


catalog_router.message.filter(lambda message: chat_allowed(message.chat.id))
catalog_router.callback_query.filter(
    lambda callback: callback.message is not None and chat_allowed(callback.message.chat.id)
)

FILTER_KEYS: dict[str, str] = {
    "name": "product_name",
    "category": "category",
    "min": "min_price",
    "max": "max_price",
}

FIELD_LABELS: dict[str, str] = {
    "product_name": "Name",
    "category": "Category",
    "min_price": "Min price",
    "max_price": "Max price",
}

HELP = (
    "📦 <b>Product Catalog</b>\n\n"
    "/products - current page\n"
    "/filter name=phone category=Livros min=10 max=50 - search\n"
    "/clear - reset filters\n"
    "/categories - choose a category\n"
    "/export - current page as CSV"
)

_page: ProductsPage | None = None
_categories: list[str] = []


def get_page() -> ProductsPage:
    global _page
    if _page is None:
        _page = ProductsPage()
    return _page


def parse_filter_args(args: str) -> dict[str, str]:
    """
    Разбирает аргументы /filter вида key=value.

    Значения с пробелами берутся в кавычки: name="smart tv". Пустое значение
    (min=) очищает поле.
    """
    values: dict[str, str] = {}
    for token in shlex.split(args):
        key, sep, value = token.partition("=")
        field = FILTER_KEYS.get(key.strip().lower())
        if not sep or field is None:
            raise ValueError(f"Unknown filter: {token}")
        values[field] = value
    return values


def format_errors(errors: dict[str, str]) -> str:
    lines = [f"• {FIELD_LABELS.get(field, field)}: {message}" for field, message in errors.items()]
    return "❌ Invalid filters:\n" + "\n".join(lines)


async def load_categories(page: ProductsPage) -> list[str]:
    global _categories
    if not _categories:
        try:
            _categories = await page.query.api.get_categories()
        except ProductsApiError as e:
            logger.warning("Категории недоступны, используем список по умолчанию: %s", e)
            _categories = list(CatalogSettings.CATEGORIES)
    return _categories


async def send_page(message: types.Message) -> None:
    page = get_page()
    await page.load()
    chunks = split_message(page.render())
    for chunk in chunks[:-1]:
        await message.answer(chunk, parse_mode="HTML")
    await message.answer(
        chunks[-1], parse_mode="HTML", reply_markup=page_keyboard(page.pagination_view())
    )


async def refresh_page(callback: types.CallbackQuery) -> None:
    """Перерисовывает страницу в сообщении с кнопками, либо шлет новую."""
    page = get_page()
    await page.load()
    chunks = split_message(page.render())
    if len(chunks) > 1:
        await send_page(callback.message)
        return
    try:
        await callback.message.edit_text(
            chunks[0], parse_mode="HTML", reply_markup=page_keyboard(page.pagination_view())
        )
    except TelegramBadRequest as e:
        logger.debug("Сообщение не обновлено: %s", e)


@catalog_router.message(CommandStart())
async def start_cmd(message: types.Message):
    await message.answer(HELP, parse_mode="HTML")


@catalog_router.message(or_f(Command("products"), (F.text.lower() == "products")))
async def products_cmd(message: types.Message):
    await send_page(message)


@catalog_router.message(Command("filter"))
async def filter_cmd(message: types.Message, command: CommandObject):
    page = get_page()
    try:
        values = parse_filter_args(command.args or "")
    except ValueError as e:
        await message.answer(f"❌ {escape(str(e))}\n\n{HELP}", parse_mode="HTML")
        return
    if not values:
        await message.answer(HELP, parse_mode="HTML")
        return

    if not page.filters.submit(values):
        if page.filters.is_busy:
            await message.answer("⏳ Search in progress, please wait.")
        else:
            await message.answer(format_errors(page.filters.errors))
        return
    await send_page(message)


@catalog_router.message(Command("clear"))
async def clear_cmd(message: types.Message):
    get_page().filters.clear()
    await send_page(message)


@catalog_router.message(Command("categories"))
async def categories_cmd(message: types.Message):
    page = get_page()
    categories = await load_categories(page)
    await message.answer(
        "🗂 Choose a category:",
        reply_markup=categories_keyboard(categories, page.store.filters.category or ""),
    )


@catalog_router.message(Command("export"))
async def export_cmd(message: types.Message):
    page = get_page()
    state = await page.load()
    if state.is_error:
        await message.answer("❌ Nothing to export: products failed to load.")
        return
    index = page.store.pagination.page_index + 1
    document = BufferedInputFile(export_csv(state.products), filename=f"products_page_{index}.csv")
    await message.answer_document(document, caption=f"{len(state.products)} products")


@catalog_router.callback_query(F.data.startswith("page:"))
async def page_callback(callback: types.CallbackQuery):
    page = get_page()
    control = page.pagination
    total_pages = page.state.total_pages
    action = callback.data.split(":", 1)[1]
    moves = {
        "first": control.first,
        "previous": control.previous,
        "next": lambda: control.next(total_pages),
        "last": lambda: control.last(total_pages),
    }
    move = moves.get(action)
    if move is None or not move():
        await callback.answer()
        return
    await callback.answer("⏳ Loading...")
    await refresh_page(callback)


@catalog_router.callback_query(F.data.startswith("size:"))
async def size_callback(callback: types.CallbackQuery):
    page = get_page()
    try:
        page.pagination.change_page_size(int(callback.data.split(":", 1)[1]))
    except ValueError:
        await callback.answer("Unsupported page size")
        return
    await callback.answer()
    await refresh_page(callback)


@catalog_router.callback_query(F.data == "cat:list")
async def categories_callback(callback: types.CallbackQuery):
    await callback.answer()
    await categories_cmd(callback.message)


@catalog_router.callback_query(F.data.startswith("cat:"))
async def category_callback(callback: types.CallbackQuery):
    page = get_page()
    choice = callback.data.split(":", 1)[1]
    categories = await load_categories(page)
    if choice == "all":
        category = ""
    elif choice.isdigit() and int(choice) < len(categories):
        category = categories[int(choice)]
    else:
        await callback.answer("Unknown category")
        return

    if not page.filters.submit({"category": category}):
        if page.filters.is_busy:
            await callback.answer("⏳ Search in progress, please wait.")
        else:
            await callback.answer("❌ Invalid filters")
            await callback.message.answer(format_errors(page.filters.errors))
        return
    await callback.answer()
    await send_page(callback.message)


@catalog_router.callback_query(F.data == "clear")
async def clear_callback(callback: types.CallbackQuery):
    get_page().filters.clear()
    await callback.answer()
    await refresh_page(callback)


@catalog_router.callback_query(F.data == "retry")
async def retry_callback(callback: types.CallbackQuery):
    await callback.answer("⏳ Loading...")
    await refresh_page(callback)


@catalog_router.callback_query(F.data == "noop")
async def noop_callback(callback: types.CallbackQuery):
    await callback.answer()
