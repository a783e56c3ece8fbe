from functools import wraps
from typing import Any, Dict

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from sushigo import socketio
from sushigo.models import PLAYING, ROUND_END, GAME_END
from sushigo.services.sushi import Forbidden, InvalidState, MatchError, MatchRegistry, RoundAdvanceScheduler
from sushigo.services.sushi.match import CONTINUE, Match


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _namespace() -> str:
    return request.namespace  # type: ignore


def _registry() -> MatchRegistry:
    return current_app.extensions['match_registry']


def _scheduler() -> RoundAdvanceScheduler:
    return current_app.extensions['round_scheduler']


def _room(match: Match) -> str:
    return f"match:{match.code}"


def _payload(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def reports_errors(handler):
    """Turn a rejected intent into a single `error` event for the caller."""
    @wraps(handler)
    def wrapper(*args, **kwargs):
        try:
            return handler(*args, **kwargs)
        except MatchError as exc:
            current_app.logger.info(f"[rejected] sid={_get_sid()} event={handler.__name__} kind={exc.kind} message={exc.message}")
            emit('error', exc.to_dict())
    return wrapper


# ---- outbound helpers (usable from handlers and background tasks) ----

def _broadcast_state(match: Match, namespace: str) -> None:
    socketio.emit('state_update', {'state': match.public_state()}, to=_room(match), namespace=namespace)


def _deal_hands(match: Match, namespace: str) -> None:
    for player in match.connected_players:
        socketio.emit('hand_dealt', {'hand': [c.to_dict() for c in player.hand]},
                      to=player.connection_handle, namespace=namespace)


def _announce_round(match: Match, namespace: str) -> None:
    socketio.emit('match_started', {'state': match.public_state()}, to=_room(match), namespace=namespace)
    _deal_hands(match, namespace)


def _schedule_next_round(match: Match, namespace: str) -> None:
    app = current_app._get_current_object()
    registry = _registry()
    match_id, expected_round = match.id, match.current_round

    def _advance():
        with app.app_context():
            live = registry.get(match_id)
            if not live or live.phase != ROUND_END or live.current_round != expected_round:
                app.logger.info(f"[timer-abort] match={match_id} no longer waiting on round {expected_round}")
                return
            live.start_next_round()
            app.logger.info(f"[round-start] match={live.code} round={live.current_round}")
            _announce_round(live, namespace)

    _scheduler().schedule(match_id, _advance)


def _resolve_turn(match: Match, namespace: str) -> None:
    """Reveal once every connected player has confirmed, then advance."""
    if match.phase != PLAYING or not match.all_confirmed():
        return
    revealed = match.reveal_cards()
    socketio.emit('cards_revealed', {
        'revealed': [{'player_id': r['player_id'], 'cards': [c.to_dict() for c in r['cards']]} for r in revealed],
        'state': match.public_state(),
    }, to=_room(match), namespace=namespace)

    result = match.process_turn()
    current_app.logger.info(f"[turn] match={match.code} round={match.current_round} turn={match.current_turn} result={result}")
    if result == CONTINUE:
        _deal_hands(match, namespace)
        _broadcast_state(match, namespace)
    elif result == ROUND_END:
        socketio.emit('round_end', {'scores': match.round_scores(), 'state': match.public_state()},
                      to=_room(match), namespace=namespace)
        _schedule_next_round(match, namespace)
    elif result == GAME_END:
        _scheduler().cancel(match.id)
        socketio.emit('match_end', {
            'final_scores': match.final_scores(),
            'winner': match.winner(),
            'scores': match.round_scores(),
            'state': match.public_state(),
        }, to=_room(match), namespace=namespace)


def _discard_abandoned() -> None:
    for match_id in _registry().cleanup():
        _scheduler().cancel(match_id)


# ---- handlers ----

def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    sid = _get_sid()
    registry = _registry()
    match = registry.get_by_handle(sid)
    if not match:
        return
    if match.is_host(sid):
        registry.release_host(sid)
        current_app.logger.info(f"[host-left] match={match.code}")
    player = match.remove_player(sid)
    if player:
        current_app.logger.info(f"[player-left] match={match.code} player={player.id} phase={match.phase}")

    _discard_abandoned()
    if match.id not in registry:
        return
    _broadcast_state(match, _namespace())
    # The barrier ignores absent players, so their leaving may complete it
    _resolve_turn(match, _namespace())


@reports_errors
def handle_create_match(data=None):
    registry = _registry()
    current = registry.get_by_handle(_get_sid())
    if current:
        raise InvalidState(f"You are already in match {current.code}")
    match = registry.create_match(_get_sid())
    join_room(_room(match))
    emit('match_created', {'code': match.code, 'id': match.id, 'state': match.public_state()})


@reports_errors
def handle_join_match(data=None):
    data = _payload(data)
    sid = _get_sid()
    registry = _registry()
    match = registry.require_by_code(data.get('code'))
    current = registry.get_by_handle(sid)
    if current and current is not match:
        raise InvalidState(f"You are already in match {current.code}")
    player = match.add_player(sid, data.get('name'))
    join_room(_room(match))
    current_app.logger.info(f"[player-joined] match={match.code} player={player.id} name={player.name}")

    state = match.public_state()
    emit('player_joined', {
        'player': player.to_dict(),
        'players': state['players'],
        'state': state,
    }, to=_room(match))


@reports_errors
def handle_rejoin_match(data=None):
    data = _payload(data)
    sid = _get_sid()
    registry = _registry()
    current = registry.get_by_handle(sid)
    if current:
        raise InvalidState(f"You are already in match {current.code}")
    match = registry.require_by_code(data.get('code'))
    player = match.reconnect_player(data.get('player_id'), sid)
    join_room(_room(match))
    current_app.logger.info(f"[player-rejoined] match={match.code} player={player.id}")
    _broadcast_state(match, _namespace())
    if match.phase in (PLAYING, ROUND_END):
        emit('hand_dealt', {'hand': [c.to_dict() for c in player.hand]})


@reports_errors
def handle_select_seat(data=None):
    data = _payload(data)
    match = _registry().require_by_handle(_get_sid())
    player = match.select_seat(_get_sid(), data.get('seat_index'))
    current_app.logger.info(f"[seat] match={match.code} player={player.id} seat={player.seat_index}")
    _broadcast_state(match, _namespace())


@reports_errors
def handle_start_match(data=None):
    sid = _get_sid()
    match = _registry().require_by_handle(sid)
    if not match.is_host(sid):
        raise Forbidden('Only the host can start the match')
    match.start()
    current_app.logger.info(f"[match-start] match={match.code} players={match.player_count} cards_per_hand={match.cards_per_hand}")
    _announce_round(match, _namespace())


@reports_errors
def handle_select_cards(data=None):
    data = _payload(data)
    match = _registry().require_by_handle(_get_sid())
    match.select_cards(_get_sid(), data.get('card_ids'))


@reports_errors
def handle_confirm_selection(data=None):
    match = _registry().require_by_handle(_get_sid())
    player = match.confirm_selection(_get_sid())
    emit('player_ready', {'player_id': player.id}, to=_room(match))
    _resolve_turn(match, _namespace())


@reports_errors
def handle_restart_match(data=None):
    sid = _get_sid()
    match = _registry().require_by_handle(sid)
    if not match.is_host(sid):
        raise Forbidden('Only the host can restart the match')
    match.restart()
    _scheduler().cancel(match.id)
    current_app.logger.info(f"[match-restart] match={match.code}")
    _broadcast_state(match, _namespace())


@reports_errors
def handle_spectate(data=None):
    data = _payload(data)
    match = _registry().require_by_code(data.get('code'))
    join_room(_room(match))
    emit('state_update', {'state': match.public_state()})


def handle_leave_room(data=None):
    data = _payload(data)
    match = _registry().get_by_code(data.get('code'))
    if match:
        leave_room(_room(match))
        emit('left', {'room': _room(match)})


def handle_ping(data=None):
    emit('pong', data or {})


_HANDLERS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('create_match', handle_create_match),
    ('join_match', handle_join_match),
    ('rejoin_match', handle_rejoin_match),
    ('select_seat', handle_select_seat),
    ('start_match', handle_start_match),
    ('select_cards', handle_select_cards),
    ('confirm_selection', handle_confirm_selection),
    ('restart_match', handle_restart_match),
    ('spectate', handle_spectate),
    ('leave_room', handle_leave_room),
    ('ping', handle_ping),
)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for event, handler in _HANDLERS:
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        for event, handler in _HANDLERS:
            socketio.on_event(event, handler, namespace='/')
