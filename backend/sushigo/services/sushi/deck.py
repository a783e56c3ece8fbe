import random
from typing import Dict, List, Optional

from sushigo.models import Card, CARD_TYPES, DECK_CONFIG
from .errors import InsufficientCardsError


class CardPool:
    """The multiset of cards a match deals from.

    Card ids keep counting up across resets so a card dealt in a later
    round never shares an id with one already on the table.
    """

    def __init__(self, config: Optional[Dict[str, int]] = None, rng: Optional[random.Random] = None):
        self.config = dict(config or DECK_CONFIG)
        unknown = set(self.config) - set(CARD_TYPES)
        if unknown:
            raise ValueError(f"Unknown card types in deck config: {sorted(unknown)}")
        self._rng = rng or random.Random()
        self._next_id = 1
        self._cards: List[Card] = []
        self.reset()

    def reset(self) -> None:
        cards = []
        for card_type, count in self.config.items():
            for _ in range(count):
                cards.append(Card(id=f"card_{self._next_id}", type=card_type))
                self._next_id += 1
        self._cards = cards

    def shuffle(self) -> None:
        # Fisher-Yates
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def deal(self, count: int) -> List[Card]:
        if count > len(self._cards):
            raise InsufficientCardsError(f"Cannot deal {count} cards, only {len(self._cards)} remaining")
        dealt = self._cards[:count]
        del self._cards[:count]
        return dealt

    @property
    def remaining(self) -> int:
        return len(self._cards)

    @property
    def total(self) -> int:
        return sum(self.config.values())

    def __len__(self):
        return len(self._cards)
