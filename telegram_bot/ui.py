from typing import Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from catalog.config import PaginationSettings
from catalog.pagination import PaginationView

MESSAGE_LIMIT = 4096
NOOP = "noop"


def _button(text: str, data: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(text=text, callback_data=data)


def navigation_row(view: PaginationView) -> list[InlineKeyboardButton]:
    back = view.can_go_back
    forward = view.can_go_forward
    return [
        _button("⏮" if back else "·", "page:first" if back else NOOP),
        _button("◀️" if back else "·", "page:previous" if back else NOOP),
        _button(f"{view.current_page}/{view.total_pages}", NOOP),
        _button("▶️" if forward else "·", "page:next" if forward else NOOP),
        _button("⏭" if forward else "·", "page:last" if forward else NOOP),
    ]


def page_size_row(current: int) -> list[InlineKeyboardButton]:
    return [
        _button(f"• {size}" if size == current else str(size), f"size:{size}")
        for size in PaginationSettings.PAGE_SIZE_OPTIONS
    ]


def page_keyboard(view: PaginationView | None) -> InlineKeyboardMarkup:
    """Клавиатура под страницей. Без view (ошибка) - только повтор и сброс."""
    rows: list[list[InlineKeyboardButton]] = []
    if view is None:
        rows.append([_button("🔄 Retry", "retry")])
    else:
        rows.append(navigation_row(view))
        rows.append(page_size_row(view.page_size))
    rows.append([_button("🗂 Categories", "cat:list"), _button("✖️ Clear filters", "clear")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def categories_keyboard(categories: Sequence[str], selected: str = "") -> InlineKeyboardMarkup:
    # в callback_data индекс: названия категорий могут не влезть в 64 байта
    rows = [
        [_button(f"✅ {name}" if name == selected else name, f"cat:{index}")]
        for index, name in enumerate(categories)
    ]
    rows.append([_button("All categories", "cat:all")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def split_message(text: str, limit: int = MESSAGE_LIMIT) -> list[str]:
    """Режет текст по границам абзацев, чтобы не разрывать HTML-разметку карточек."""
    chunks: list[str] = []
    current = ""
    for block in text.split("\n\n"):
        candidate = f"{current}\n\n{block}" if current else block
        if len(candidate) <= limit:
            current = candidate
            continue
        if current:
            chunks.append(current)
        while len(block) > limit:
            chunks.append(block[:limit])
            block = block[limit:]
        current = block
    if current:
        chunks.append(current)
    return chunks
