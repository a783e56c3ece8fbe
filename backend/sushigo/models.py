import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

# Card kinds
TEMPURA = 'tempura'
SASHIMI = 'sashimi'
DUMPLING = 'dumpling'
MAKI_1 = 'maki1'
MAKI_2 = 'maki2'
MAKI_3 = 'maki3'
NIGIRI_EGG = 'nigiri_egg'
NIGIRI_SALMON = 'nigiri_salmon'
NIGIRI_SQUID = 'nigiri_squid'
WASABI = 'wasabi'
PUDDING = 'pudding'
CHOPSTICKS = 'chopsticks'

CARD_TYPES = (
    TEMPURA, SASHIMI, DUMPLING,
    MAKI_1, MAKI_2, MAKI_3,
    NIGIRI_EGG, NIGIRI_SALMON, NIGIRI_SQUID,
    WASABI, PUDDING, CHOPSTICKS,
)

DECK_CONFIG: Dict[str, int] = {
    TEMPURA: 14,
    SASHIMI: 14,
    DUMPLING: 14,
    MAKI_3: 8,
    MAKI_2: 12,
    MAKI_1: 6,
    NIGIRI_SALMON: 10,
    NIGIRI_SQUID: 5,
    NIGIRI_EGG: 5,
    WASABI: 6,
    PUDDING: 10,
    CHOPSTICKS: 4,
}

NIGIRI_VALUES: Dict[str, int] = {NIGIRI_EGG: 1, NIGIRI_SALMON: 2, NIGIRI_SQUID: 3}
MAKI_PIPS: Dict[str, int] = {MAKI_1: 1, MAKI_2: 2, MAKI_3: 3}

# Cards dealt to each player per round, by seated player count
CARDS_PER_PLAYER: Dict[int, int] = {2: 10, 3: 9, 4: 8, 5: 7}
TOTAL_ROUNDS = 3
MIN_PLAYERS = 2
DEFAULT_MAX_PLAYERS = 4

# Match phases
LOBBY = 'lobby'
PLAYING = 'playing'
ROUND_END = 'round_end'
GAME_END = 'game_end'


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class Card:
    id: str
    type: str

    def to_dict(self):
        return {'id': self.id, 'type': self.type}


class Player:
    """One participant in a match.

    `id` is stable for the life of the match; `connection_handle` is the
    opaque transport identity and is swapped on reconnect.
    """

    def __init__(self, name: str, connection_handle: Optional[str], total_rounds: int = TOTAL_ROUNDS, player_id: Optional[str] = None):
        self.id = player_id or new_id('player')
        self.connection_handle = connection_handle
        self.name = name
        self.is_connected = True
        self.seat_index: Optional[int] = None
        self.reset(total_rounds)

    def reset(self, total_rounds: int = TOTAL_ROUNDS) -> None:
        self.hand: List[Card] = []
        self.played_cards: List[List[Card]] = [[] for _ in range(total_rounds)]
        self.selected_cards: List[Card] = []
        self.has_confirmed = False
        self.score = 0
        self.puddings = 0

    def to_dict(self):
        # Public view: the hand itself is private to its owner
        return {
            'id': self.id,
            'name': self.name,
            'played_cards': [[c.to_dict() for c in cards] for cards in self.played_cards],
            'score': self.score,
            'puddings': self.puddings,
            'has_confirmed': self.has_confirmed,
            'is_connected': self.is_connected,
            'hand_size': len(self.hand),
            'seat_index': self.seat_index,
        }
