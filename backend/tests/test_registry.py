import random

import pytest

from sushigo.models import LOBBY
from sushigo.services.sushi import InvalidInput, MatchRegistry, NotFound, normalize_code
from sushigo.services.sushi.registry import CODE_ALPHABET


def test_create_match_assigns_code_and_host(registry):
    match = registry.create_match('host-1')
    assert match.phase == LOBBY
    assert match.host_handle == 'host-1'
    assert len(match.code) == 4
    assert all(ch in CODE_ALPHABET for ch in match.code)
    assert registry.get(match.id) is match
    assert len(registry) == 1


def test_alphabet_has_no_confusable_glyphs():
    for ch in '01OI':
        assert ch not in CODE_ALPHABET


def test_code_collision_is_regenerated():
    class ScriptedRandom(random.Random):
        def __init__(self, letters):
            super().__init__()
            self._letters = iter(letters)

        def choice(self, seq):
            return next(self._letters)

    registry = MatchRegistry(rng=ScriptedRandom('AAAA' 'AAAA' 'BBBB'))
    first = registry.create_match('h1')
    second = registry.create_match('h2')
    assert first.code == 'AAAA'
    assert second.code == 'BBBB'


def test_lookup_by_code_is_case_insensitive(registry):
    match = registry.create_match('host-1')
    assert registry.get_by_code(match.code.lower()) is match
    assert registry.require_by_code(f' {match.code.lower()} ') is match


def test_require_by_code_errors(registry):
    with pytest.raises(NotFound):
        registry.require_by_code('ZZZZ')
    with pytest.raises(InvalidInput):
        registry.require_by_code('')
    with pytest.raises(InvalidInput):
        registry.require_by_code(None)


@pytest.mark.parametrize('bad', ['ABC', 'ABCDE', 'AB0D', 'AB!D', 1234])
def test_normalize_code_rejects_malformed(bad):
    with pytest.raises(InvalidInput):
        normalize_code(bad)


def test_lookup_by_handle_finds_players_and_host(registry):
    match = registry.create_match('host-1')
    match.add_player('sid-a', 'Alice')
    assert registry.get_by_handle('sid-a') is match
    assert registry.get_by_handle('host-1') is match
    assert registry.get_by_handle('sid-stranger') is None
    assert registry.get_by_handle(None) is None
    with pytest.raises(NotFound):
        registry.require_by_handle('sid-stranger')


def test_remove_frees_code(registry):
    match = registry.create_match('host-1')
    assert registry.remove(match.id) is match
    assert registry.get_by_code(match.code) is None
    assert match.code not in registry.codes
    assert registry.remove(match.id) is None


def test_cleanup_drops_only_abandoned_matches(registry):
    hosted = registry.create_match('host-1')
    empty = registry.create_match('host-2')
    with_players = registry.create_match('host-3')
    with_players.add_player('sid-a', 'Alice')

    registry.release_host('host-2')
    registry.release_host('host-3')
    removed = registry.cleanup()

    assert removed == [empty.id]
    assert hosted.id in registry
    assert with_players.id in registry


def test_match_with_only_disconnected_players_is_abandoned(registry):
    match = registry.create_match('host-1')
    for name in ('Alice', 'Bob'):
        match.add_player(f'sid-{name}', name)
        match.select_seat(f'sid-{name}', len(match.players) - 1)
    match.start()
    registry.release_host('host-1')
    match.remove_player('sid-Alice')
    assert not registry.is_abandoned(match)
    match.remove_player('sid-Bob')
    assert registry.is_abandoned(match)


def test_max_players_passed_to_matches():
    registry = MatchRegistry(max_players=3)
    assert registry.create_match('h').max_players == 3


def test_reset(registry):
    registry.create_match('h1')
    registry.create_match('h2')
    registry.reset()
    assert len(registry) == 0
    assert registry.codes == []
