"""In-memory board registry implementing the card store and settings contracts."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from .contracts import SettingsListener
from .errors import BoardPersistError, CardNotFoundError
from .model import BoardDocument, Card

PersistHook = Callable[[BoardDocument], None]


class InMemoryBoardRegistry:
    """Holds the open board documents and hands mutated ones to a persist hook.

    Card ids are unique across documents, so every lookup stops at the first
    match. The registry does not lock documents: concurrent external edits are
    last-writer-wins at the persistence layer.
    """

    def __init__(
        self,
        documents: Iterable[BoardDocument] = (),
        *,
        persist: Optional[PersistHook] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._documents: dict[str, BoardDocument] = {}
        self._persist = persist
        self._logger = logger or logging.getLogger("board")
        self._settings_listeners: list[SettingsListener] = []
        for document in documents:
            self.add_document(document)

    def add_document(self, document: BoardDocument) -> None:
        self._documents[document.path] = document
        self._logger.debug("Board document registered: %s", document.path)

    def remove_document(self, path: str) -> Optional[BoardDocument]:
        return self._documents.pop(path, None)

    def documents(self) -> list[BoardDocument]:
        return list(self._documents.values())

    def document_for_card(self, card_id: str) -> Optional[BoardDocument]:
        for document in self._documents.values():
            if document.find_card(card_id) is not None:
                return document
        return None

    def find_card(self, card_id: str) -> Optional[Card]:
        for document in self._documents.values():
            card = document.find_card(card_id)
            if card is not None:
                return card
        return None

    def update_card_body(self, card_id: str, body: str) -> None:
        for document in self._documents.values():
            card = document.find_card(card_id)
            if card is None:
                continue
            card.body = body
            self._persist_document(document)
            return
        raise CardNotFoundError(f"Card not found: {card_id}")

    def board_setting(self, card_id: str, key: str) -> Any:
        document = self.document_for_card(card_id)
        if document is None:
            return None
        return document.settings.get(key)

    def set_board_setting(self, card_id: str, key: str, value: Any) -> bool:
        document = self.document_for_card(card_id)
        if document is None:
            return False
        document.settings[key] = value
        self._persist_document(document)
        self._notify_settings_changed(document.path, key)
        return True

    def subscribe_settings(self, listener: SettingsListener) -> Callable[[], None]:
        self._settings_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._settings_listeners:
                self._settings_listeners.remove(listener)

        return unsubscribe

    def _notify_settings_changed(self, path: str, key: str) -> None:
        for listener in tuple(self._settings_listeners):
            try:
                listener(path, key)
            except Exception:
                self._logger.exception(
                    "Board settings listener failed: path=%s key=%s", path, key
                )

    def _persist_document(self, document: BoardDocument) -> None:
        if self._persist is None:
            return
        try:
            self._persist(document)
        except Exception as error:
            raise BoardPersistError(
                f"Failed to persist board {document.path}: {error}"
            ) from error
