"""JSON-shaped mapping of board documents exchanged with the board host."""

from __future__ import annotations

from typing import Any, Mapping

from .errors import BoardError
from .model import BoardDocument, Card, Lane


def document_from_dict(data: Any) -> BoardDocument:
    """Build a document from ``{"path", "settings", "lanes": [...]}``.

    Raises ``BoardError`` when the payload is not shaped like a board.
    """
    if not isinstance(data, Mapping):
        raise BoardError("Board must be an object")
    path = data.get("path")
    if not isinstance(path, str) or not path.strip():
        raise BoardError("Board path must be a non-empty string")
    settings = data.get("settings") or {}
    if not isinstance(settings, Mapping):
        raise BoardError(f"Board settings must be an object: {path}")
    lanes = data.get("lanes") or []
    if not isinstance(lanes, list):
        raise BoardError(f"Board lanes must be a list: {path}")

    return BoardDocument(
        path=path,
        lanes=[_lane_from_dict(lane, path) for lane in lanes],
        settings=dict(settings),
    )


def document_to_dict(document: BoardDocument) -> dict[str, Any]:
    return {
        "path": document.path,
        "settings": dict(document.settings),
        "lanes": [
            {
                "id": lane.id,
                "title": lane.title,
                "cards": [_card_to_dict(card) for card in lane.cards],
            }
            for lane in document.lanes
        ],
    }


def _lane_from_dict(data: Any, path: str) -> Lane:
    if not isinstance(data, Mapping):
        raise BoardError(f"Lane must be an object: {path}")
    lane_id = _required_str(data, "id", path)
    cards = data.get("cards") or []
    if not isinstance(cards, list):
        raise BoardError(f"Lane cards must be a list: {path} lane={lane_id}")
    return Lane(
        id=lane_id,
        title=str(data.get("title") or ""),
        cards=[_card_from_dict(card, path) for card in cards],
    )


def _card_from_dict(data: Any, path: str) -> Card:
    if not isinstance(data, Mapping):
        raise BoardError(f"Card must be an object: {path}")
    card_id = _required_str(data, "id", path)
    body = data.get("body", "")
    if not isinstance(body, str):
        raise BoardError(f"Card body must be a string: {path} card={card_id}")
    children = data.get("children") or []
    if not isinstance(children, list):
        raise BoardError(f"Card children must be a list: {path} card={card_id}")
    return Card(
        id=card_id,
        body=body,
        children=[_card_from_dict(child, path) for child in children],
    )


def _card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "body": card.body,
        "children": [_card_to_dict(child) for child in card.children],
    }


def _required_str(data: Mapping[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise BoardError(f"Missing {key} in board {path}")
    return value
