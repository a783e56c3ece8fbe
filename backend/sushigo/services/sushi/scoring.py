"""Round and end-of-game scoring.

All functions are pure. Per-player scoring works on one player's cards
for one round, in the order they were played. Maki and pudding are
comparative and take a mapping of player id to count instead.
"""

from typing import Dict, Iterable, Sequence

from sushigo.models import (
    Card, TEMPURA, SASHIMI, DUMPLING, WASABI, PUDDING,
    NIGIRI_VALUES, MAKI_PIPS,
)

DUMPLING_POINTS = [0, 1, 3, 6, 10, 15]
MAKI_FIRST_POINTS = 6
MAKI_SECOND_POINTS = 3
PUDDING_MOST_POINTS = 6
PUDDING_LEAST_POINTS = -6


def count_type(cards: Iterable[Card], *types: str) -> int:
    return sum(1 for c in cards if c.type in types)


def score_tempura(cards: Sequence[Card]) -> int:
    """5 points per pair."""
    return (count_type(cards, TEMPURA) // 2) * 5


def score_sashimi(cards: Sequence[Card]) -> int:
    """10 points per set of three."""
    return (count_type(cards, SASHIMI) // 3) * 10


def score_dumplings(cards: Sequence[Card]) -> int:
    return DUMPLING_POINTS[min(count_type(cards, DUMPLING), 5)]


def score_nigiri(cards: Sequence[Card]) -> int:
    """Score nigiri in play order.

    A wasabi waits for the next nigiri played after it and triples that
    nigiri. Several pending wasabi are consumed oldest first. A wasabi
    with no later nigiri is worth nothing.
    """
    score = 0
    pending_wasabi = 0
    for card in cards:
        if card.type == WASABI:
            pending_wasabi += 1
        elif card.type in NIGIRI_VALUES:
            value = NIGIRI_VALUES[card.type]
            if pending_wasabi:
                pending_wasabi -= 1
                value *= 3
            score += value
    return score


def count_maki(cards: Iterable[Card]) -> int:
    return sum(MAKI_PIPS.get(c.type, 0) for c in cards)


def count_puddings(cards: Iterable[Card]) -> int:
    return count_type(cards, PUDDING)


def score_round_cards(cards: Sequence[Card]) -> int:
    """Points one player earns on their own for a round (no maki, no pudding)."""
    return score_tempura(cards) + score_sashimi(cards) + score_dumplings(cards) + score_nigiri(cards)


def score_breakdown(cards: Sequence[Card]) -> Dict[str, int]:
    return {
        'tempura': score_tempura(cards),
        'sashimi': score_sashimi(cards),
        'dumpling': score_dumplings(cards),
        'nigiri': score_nigiri(cards),
        'maki_pips': count_maki(cards),
        'puddings': count_puddings(cards),
    }


def score_maki(maki_counts: Dict[str, int]) -> Dict[str, int]:
    """Award the round's maki bonus.

    Most pips earns 6; a tie for most splits the 6 (floor division) and
    nobody is paid for second. Second most earns 3, split the same way.
    Players without maki never score.
    """
    scores = {player_id: 0 for player_id in maki_counts}
    ranked = sorted({count for count in maki_counts.values() if count > 0}, reverse=True)
    if not ranked:
        return scores

    first = [pid for pid, count in maki_counts.items() if count == ranked[0]]
    for pid in first:
        scores[pid] = MAKI_FIRST_POINTS // len(first)
    if len(first) > 1 or len(ranked) < 2:
        return scores

    second = [pid for pid, count in maki_counts.items() if count == ranked[1]]
    for pid in second:
        scores[pid] = MAKI_SECOND_POINTS // len(second)
    return scores


def score_puddings(pudding_counts: Dict[str, int]) -> Dict[str, int]:
    """Award the end-of-game pudding bonus and penalty.

    The penalty for fewest puddings is skipped in two-player games and
    when everyone is tied.
    """
    scores = {player_id: 0 for player_id in pudding_counts}
    if not pudding_counts:
        return scores

    most = max(pudding_counts.values())
    least = min(pudding_counts.values())

    leaders = [pid for pid, count in pudding_counts.items() if count == most]
    for pid in leaders:
        scores[pid] += PUDDING_MOST_POINTS // len(leaders)

    if len(pudding_counts) > 2 and least != most:
        trailers = [pid for pid, count in pudding_counts.items() if count == least]
        for pid in trailers:
            scores[pid] += PUDDING_LEAST_POINTS // len(trailers)
    return scores
