"""Board document tree and the narrow interfaces the timer core uses."""

from .contracts import (
    BoardRegistryLike,
    BoardSettingsLike,
    CardStoreLike,
    DocumentRegistryLike,
)
from .errors import BoardError, BoardPersistError, CardNotFoundError
from .codec import document_from_dict, document_to_dict
from .model import BoardDocument, Card, Lane
from .registry import InMemoryBoardRegistry

__all__ = [
    "BoardDocument",
    "BoardError",
    "BoardPersistError",
    "BoardRegistryLike",
    "BoardSettingsLike",
    "Card",
    "CardNotFoundError",
    "CardStoreLike",
    "DocumentRegistryLike",
    "InMemoryBoardRegistry",
    "Lane",
    "document_from_dict",
    "document_to_dict",
]
