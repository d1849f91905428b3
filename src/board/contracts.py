"""Protocols describing the board capabilities the focus timer depends on."""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from .model import BoardDocument, Card

SettingsListener = Callable[[str, str], None]


class DocumentRegistryLike(Protocol):
    """Enumerates every known board document."""
    def documents(self) -> list[BoardDocument]:
        ...


class CardStoreLike(Protocol):
    """Card lookup and body update across all known documents."""
    def find_card(self, card_id: str) -> Optional[Card]:
        ...

    def update_card_body(self, card_id: str, body: str) -> None:
        ...


class BoardSettingsLike(Protocol):
    """Board-scoped setting overrides for the board owning a card."""
    def board_setting(self, card_id: str, key: str) -> Any:
        ...

    def set_board_setting(self, card_id: str, key: str, value: Any) -> bool:
        ...

    def subscribe_settings(self, listener: SettingsListener) -> Callable[[], None]:
        ...


class BoardRegistryLike(DocumentRegistryLike, CardStoreLike, BoardSettingsLike, Protocol):
    """Everything the timer core needs from the surrounding board plugin."""
