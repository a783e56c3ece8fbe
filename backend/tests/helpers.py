import random

from sushigo.models import Card
from sushigo.services.sushi import CardPool, Match


def make_cards(*types):
    """Build cards with throwaway ids, in the given play order."""
    return [Card(id=f"t{i}", type=t) for i, t in enumerate(types)]


def seated_match(names=('Alice', 'Bob'), seed=1):
    """A lobby match with one seated player per name; handles are 'sid-<name>'."""
    match = Match('match_test', 'ABCD', 'host-sid', pool=CardPool(rng=random.Random(seed)))
    for seat, name in enumerate(names):
        match.add_player(f'sid-{name}', name)
        match.select_seat(f'sid-{name}', seat)
    return match


def play_turn(match, choose=lambda player: [player.hand[0].id]):
    """Every connected player selects and confirms, then the turn resolves."""
    for player in match.connected_players:
        match.select_cards(player.connection_handle, choose(player))
        match.confirm_selection(player.connection_handle)
    assert match.all_confirmed()
    revealed = match.reveal_cards()
    return revealed, match.process_turn()
