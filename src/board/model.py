"""Minimal board document tree: documents hold lanes, lanes hold nested cards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional


@dataclass
class Card:
    """A board card. The first line of ``body`` is the display title."""
    id: str
    body: str
    children: list["Card"] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.body.split("\n", 1)[0].strip()

    @property
    def detail_lines(self) -> list[str]:
        return self.body.split("\n")[1:]


@dataclass
class Lane:
    id: str
    title: str
    cards: list[Card] = field(default_factory=list)


@dataclass
class BoardDocument:
    """One board pushed by the host, with its board-scoped setting overrides."""
    path: str
    lanes: list[Lane] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)

    def iter_cards(self) -> Iterator[Card]:
        for lane in self.lanes:
            yield from _walk(lane.cards)

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.iter_cards():
            if card.id == card_id:
                return card
        return None


def _walk(cards: list[Card]) -> Iterator[Card]:
    for card in cards:
        yield card
        if card.children:
            yield from _walk(card.children)
