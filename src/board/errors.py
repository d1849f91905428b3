class BoardError(Exception):
    """Base exception for board document access."""


class CardNotFoundError(BoardError):
    """Raised when a card id is not present in any known document."""


class BoardPersistError(BoardError):
    """Raised when a document could not be handed to its persistence hook."""
