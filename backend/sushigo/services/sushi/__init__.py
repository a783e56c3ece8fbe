"""Match engine: card pool, scoring, match state machine, registry and
round-advance scheduling.

Nothing in this package imports Flask; socket handlers and HTTP routes
drive it, keeping transport concerns separated from the game rules.
"""

from .errors import MatchError, NotFound, Forbidden, InvalidState, InvalidInput, Conflict, InsufficientCardsError
from .deck import CardPool
from .match import Match
from .registry import MatchRegistry, normalize_code
from .scheduler import RoundAdvanceScheduler
