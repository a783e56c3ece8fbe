import logging
import random
from typing import Dict, List, Optional

from sushigo.models import DEFAULT_MAX_PLAYERS, new_id
from .errors import InvalidInput, NotFound
from .match import Match

# No 0/O or 1/I so codes can be read aloud and typed from a screen
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
CODE_LENGTH = 4

logger = logging.getLogger(__name__)


def normalize_code(code) -> str:
    """Upper-case a user supplied join code, rejecting malformed ones."""
    if not isinstance(code, str) or not code.strip():
        raise InvalidInput('A match code is required')
    code = code.strip().upper()
    if len(code) != CODE_LENGTH or any(ch not in CODE_ALPHABET for ch in code):
        raise InvalidInput(f'"{code}" is not a valid match code')
    return code


class MatchRegistry:
    """In-memory index of live matches by id, join code and connection."""

    def __init__(self, max_players: int = DEFAULT_MAX_PLAYERS, rng: Optional[random.Random] = None):
        self.max_players = max_players
        self._rng = rng or random.Random()
        self._matches: Dict[str, Match] = {}
        self._code_to_id: Dict[str, str] = {}

    def __len__(self):
        return len(self._matches)

    def __contains__(self, match_id):
        return match_id in self._matches

    @property
    def codes(self) -> List[str]:
        return list(self._code_to_id)

    def generate_code(self) -> str:
        while True:
            code = ''.join(self._rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if code not in self._code_to_id:
                return code

    def create_match(self, host_handle: Optional[str]) -> Match:
        match = Match(new_id('match'), self.generate_code(), host_handle, max_players=self.max_players)
        self._matches[match.id] = match
        self._code_to_id[match.code] = match.id
        logger.info(f"[match-created] match={match.code} id={match.id} host={host_handle}")
        return match

    def get(self, match_id: str) -> Optional[Match]:
        return self._matches.get(match_id)

    def get_by_code(self, code: str) -> Optional[Match]:
        if not isinstance(code, str):
            return None
        match_id = self._code_to_id.get(code.strip().upper())
        return self._matches.get(match_id) if match_id else None

    def require_by_code(self, code) -> Match:
        match = self.get_by_code(normalize_code(code))
        if not match:
            raise NotFound('Match not found')
        return match

    def get_by_handle(self, handle: Optional[str]) -> Optional[Match]:
        """Find the match a connection plays in or hosts."""
        if handle is None:
            return None
        for match in self._matches.values():
            if match.player_by_handle(handle) or match.host_handle == handle:
                return match
        return None

    def require_by_handle(self, handle: Optional[str]) -> Match:
        match = self.get_by_handle(handle)
        if not match:
            raise NotFound('You are not in a match')
        return match

    def release_host(self, handle: str) -> Optional[Match]:
        """Forget a host connection; returns the match it was hosting."""
        for match in self._matches.values():
            if match.host_handle == handle:
                match.host_handle = None
                return match
        return None

    def is_abandoned(self, match: Match) -> bool:
        return not match.host_connected and not match.connected_players

    def remove(self, match_id: str) -> Optional[Match]:
        match = self._matches.pop(match_id, None)
        if match:
            self._code_to_id.pop(match.code, None)
            logger.info(f"[match-removed] match={match.code} id={match.id}")
        return match

    def cleanup(self) -> List[str]:
        """Remove every match with no host and no connected players."""
        removed = [m.id for m in list(self._matches.values()) if self.is_abandoned(m)]
        for match_id in removed:
            self.remove(match_id)
        return removed

    def reset(self) -> None:
        self._matches.clear()
        self._code_to_id.clear()
