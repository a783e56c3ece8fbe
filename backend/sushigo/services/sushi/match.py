from typing import Any, Dict, List, Optional

from sushigo.models import (
    Card, Player,
    CHOPSTICKS, CARDS_PER_PLAYER, TOTAL_ROUNDS, MIN_PLAYERS, DEFAULT_MAX_PLAYERS,
    LOBBY, PLAYING, ROUND_END, GAME_END,
)
from .deck import CardPool
from .errors import NotFound, InvalidState, InvalidInput, Conflict
from .scoring import (
    count_maki, count_puddings, score_breakdown, score_maki, score_puddings, score_round_cards,
)

CONTINUE = 'continue'


class Match:
    """State machine for a single game.

    Phases run lobby -> playing -> (round_end -> playing)* -> game_end,
    and restart() returns to lobby. Every operation validates first and
    only then mutates, so a rejected call leaves the match untouched.
    """

    def __init__(self, match_id: str, code: str, host_handle: Optional[str],
                 max_players: int = DEFAULT_MAX_PLAYERS, total_rounds: int = TOTAL_ROUNDS,
                 pool: Optional[CardPool] = None):
        self.id = match_id
        self.code = code
        self.host_handle = host_handle
        self.max_players = max_players
        self.total_rounds = total_rounds
        self.phase = LOBBY
        self.players: List[Player] = []
        self.current_round = 0
        self.current_turn = 0
        self.cards_per_hand = 0
        self.round_history: List[Dict[str, Any]] = []
        self.pudding_bonus: Dict[str, int] = {}
        self.pool = pool or CardPool()

    # ---- lookups ----

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def host_connected(self) -> bool:
        return self.host_handle is not None

    @property
    def connected_players(self) -> List[Player]:
        return [p for p in self.players if p.is_connected]

    def player_by_handle(self, handle: Optional[str]) -> Optional[Player]:
        if handle is None:
            return None
        return next((p for p in self.players if p.connection_handle == handle), None)

    def player_by_id(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def require_player(self, handle: str) -> Player:
        player = self.player_by_handle(handle)
        if not player:
            raise NotFound('You are not a player in this match')
        return player

    def is_host(self, handle: Optional[str]) -> bool:
        return handle is not None and handle == self.host_handle

    def hand_for(self, handle: str) -> List[Card]:
        player = self.player_by_handle(handle)
        return list(player.hand) if player else []

    # ---- lobby ----

    def add_player(self, handle: str, name: str) -> Player:
        name = (name or '').strip() if isinstance(name, str) else ''
        if not name:
            raise InvalidInput('A player name is required')
        if self.phase != LOBBY:
            raise InvalidState('This match has already started')
        if self.player_count >= self.max_players:
            raise InvalidState('This match is full')
        if self.player_by_handle(handle):
            raise InvalidState('You have already joined this match')
        if any(p.name.lower() == name.lower() for p in self.players):
            raise InvalidInput(f'The name "{name}" is already taken')

        player = Player(name=name, connection_handle=handle, total_rounds=self.total_rounds)
        self.players.append(player)
        return player

    def remove_player(self, handle: str) -> Optional[Player]:
        """Drop a connection from the match.

        In the lobby the player is deleted and their seat freed. Once the
        match has started the player is only marked disconnected so that
        reconnect_player() can resume them. Returns None when the handle
        does not belong to a connected player.
        """
        player = self.player_by_handle(handle)
        if not player:
            return None
        if self.phase == LOBBY:
            self.players.remove(player)
        else:
            player.is_connected = False
            player.connection_handle = None
        return player

    def reconnect_player(self, player_id: str, new_handle: str) -> Player:
        player = self.player_by_id(player_id)
        if not player:
            raise NotFound('Player not found in this match')
        if player.is_connected:
            raise InvalidState('That player is still connected')
        player.connection_handle = new_handle
        player.is_connected = True
        return player

    def select_seat(self, handle: str, seat_index: Any) -> Player:
        if self.phase != LOBBY:
            raise InvalidState('Seats can only be chosen in the lobby')
        player = self.require_player(handle)
        if isinstance(seat_index, bool) or not isinstance(seat_index, int):
            raise InvalidInput('Seat index must be a whole number')
        if not 0 <= seat_index < self.max_players:
            raise InvalidInput(f'Seat index must be between 0 and {self.max_players - 1}')
        if any(p is not player and p.seat_index == seat_index for p in self.players):
            raise Conflict('That seat is already taken')
        player.seat_index = seat_index
        return player

    def all_players_seated(self) -> bool:
        return all(p.seat_index is not None for p in self.players)

    def start(self) -> None:
        if self.phase != LOBBY:
            raise InvalidState('The match has already started')
        if len(self.connected_players) < MIN_PLAYERS:
            raise InvalidState(f'At least {MIN_PLAYERS} connected players are required to start')
        if self.player_count not in CARDS_PER_PLAYER:
            raise InvalidState(f'Cannot deal for {self.player_count} players')
        if not self.all_players_seated():
            raise InvalidState('Every player must choose a seat before starting')

        self.phase = PLAYING
        self.current_round = 1
        self.cards_per_hand = CARDS_PER_PLAYER[self.player_count]
        self.round_history = []
        self._deal_round()

    def _deal_round(self) -> None:
        self.pool.reset()
        self.pool.shuffle()
        for player in self.players:
            player.hand = self.pool.deal(self.cards_per_hand)
            player.selected_cards = []
            player.has_confirmed = False
        self.current_turn = 1

    # ---- turns ----

    def select_cards(self, handle: str, card_ids: Any) -> List[Card]:
        if self.phase != PLAYING:
            raise InvalidState('Cards can only be chosen while a round is being played')
        player = self.require_player(handle)
        if player.has_confirmed:
            raise InvalidState('Your selection is already confirmed')
        if not isinstance(card_ids, (list, tuple)) or not all(isinstance(cid, str) for cid in card_ids):
            raise InvalidInput('card_ids must be a list of card ids')
        if not card_ids:
            raise InvalidInput('Choose at least one card')
        if len(card_ids) > 2:
            raise InvalidInput('You may play at most two cards')
        if len(set(card_ids)) != len(card_ids):
            raise InvalidInput('The same card was chosen twice')

        by_id = {c.id: c for c in player.hand}
        if any(cid not in by_id for cid in card_ids):
            raise InvalidInput('That card is not in your hand')
        if len(card_ids) == 2 and not self._has_chopsticks(player):
            raise InvalidInput('You need chopsticks on the table to play two cards')

        player.selected_cards = [by_id[cid] for cid in card_ids]
        return list(player.selected_cards)

    def _has_chopsticks(self, player: Player) -> bool:
        return any(c.type == CHOPSTICKS for c in player.played_cards[self.current_round - 1])

    def confirm_selection(self, handle: str) -> Player:
        if self.phase != PLAYING:
            raise InvalidState('Nothing to confirm right now')
        player = self.require_player(handle)
        if not player.selected_cards:
            raise InvalidInput('Cannot confirm. No cards selected.')
        if player.has_confirmed:
            raise InvalidState('Your selection is already confirmed')
        player.has_confirmed = True
        return player

    def all_confirmed(self) -> bool:
        connected = self.connected_players
        return bool(connected) and all(p.has_confirmed for p in connected)

    def reveal_cards(self) -> List[Dict[str, Any]]:
        """Apply every connected player's staged cards to their play area."""
        round_idx = self.current_round - 1
        revealed = []
        for player in self.connected_players:
            selected = list(player.selected_cards)
            revealed.append({'player_id': player.id, 'cards': selected})

            played = player.played_cards[round_idx]
            played.extend(selected)
            player.puddings += count_puddings(selected)
            selected_ids = {c.id for c in selected}
            player.hand = [c for c in player.hand if c.id not in selected_ids]

            if len(selected) == 2:
                # Chopsticks go back into the hand once used
                idx = next((i for i, c in enumerate(played) if c.type == CHOPSTICKS), None)
                if idx is not None:
                    player.hand.append(played.pop(idx))

            player.selected_cards = []
            player.has_confirmed = False
        return revealed

    def pass_hands(self) -> None:
        """Rotate hands one seat among connected players.

        Odd rounds pass toward the next seat, even rounds the other way.
        """
        players = sorted(self.connected_players, key=lambda p: p.seat_index if p.seat_index is not None else self.max_players)
        if len(players) < 2:
            return
        hands = [p.hand for p in players]
        if self.current_round % 2 == 1:
            hands = hands[-1:] + hands[:-1]
        else:
            hands = hands[1:] + hands[:1]
        for player, hand in zip(players, hands):
            player.hand = hand

    def process_turn(self) -> str:
        """Pass hands and report whether the round or match is over."""
        if self.phase != PLAYING:
            raise InvalidState('No turn is in progress')
        self.pass_hands()
        self.current_turn += 1

        connected = self.connected_players
        if not connected or any(not p.hand for p in connected):
            return self._end_round()
        return CONTINUE

    def _end_round(self) -> str:
        self._score_round()
        if self.current_round >= self.total_rounds:
            return self._end_game()
        self.phase = ROUND_END
        return ROUND_END

    def _score_round(self) -> None:
        round_idx = self.current_round - 1
        maki_bonus = score_maki({p.id: count_maki(p.played_cards[round_idx]) for p in self.players})
        summary = []
        for player in self.players:
            cards = player.played_cards[round_idx]
            card_points = score_round_cards(cards)
            round_score = card_points + maki_bonus[player.id]
            player.score += round_score
            summary.append({
                'player_id': player.id,
                'card_points': card_points,
                'maki_points': maki_bonus[player.id],
                'round_score': round_score,
                'total_score': player.score,
                'breakdown': score_breakdown(cards),
            })
        self.round_history.append({'round': self.current_round, 'scores': summary})

    def _end_game(self) -> str:
        bonus = score_puddings({p.id: p.puddings for p in self.players})
        for player in self.players:
            player.score += bonus[player.id]
        self.pudding_bonus = bonus
        self.phase = GAME_END
        return GAME_END

    def start_next_round(self) -> None:
        if self.phase != ROUND_END:
            raise InvalidState('The round has not ended')
        self.current_round += 1
        self.phase = PLAYING
        for player in self.players:
            player.played_cards[self.current_round - 1] = []
        self._deal_round()

    def restart(self) -> None:
        """Return to the lobby with fresh scores.

        Seats and player ids are kept so the same table can go again and
        anyone who dropped out can still rejoin.
        """
        if self.phase == LOBBY:
            raise InvalidState('The match has not started yet')
        for player in self.players:
            player.reset(self.total_rounds)
        self.phase = LOBBY
        self.current_round = 0
        self.current_turn = 0
        self.cards_per_hand = 0
        self.round_history = []
        self.pudding_bonus = {}

    # ---- results ----

    def round_scores(self) -> List[Dict[str, Any]]:
        if not self.round_history:
            return []
        return self.round_history[-1]['scores']

    def final_scores(self) -> List[Dict[str, Any]]:
        ranked = sorted(self.players, key=lambda p: (-p.score, -p.puddings))
        return [{
            'player_id': p.id,
            'name': p.name,
            'total_score': p.score,
            'puddings': p.puddings,
            'pudding_points': self.pudding_bonus.get(p.id, 0),
        } for p in ranked]

    def winner(self) -> Optional[str]:
        scores = self.final_scores()
        return scores[0]['player_id'] if scores else None

    def public_state(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'code': self.code,
            'phase': self.phase,
            'players': [p.to_dict() for p in self.players],
            'current_round': self.current_round,
            'total_rounds': self.total_rounds,
            'current_turn': self.current_turn,
            'cards_per_hand': self.cards_per_hand,
            'max_players': self.max_players,
            'host_connected': self.host_connected,
        }
