from __future__ import annotations

from typing import Collection, Dict, List, Optional, Sequence, Tuple

# Canonical clockwise seat lists. Table sizes without an entry use 6-max.
POSITIONS: Dict[int, Tuple[str, ...]] = {
    2: ("SB", "BB"),
    6: ("SB", "BB", "UTG", "MP", "CO", "BTN"),
    9: ("SB", "BB", "UTG", "UTG+1", "MP", "MP+1", "HJ", "CO", "BTN"),
}
DEFAULT_SIZE = 6


def positions_for(size: int) -> Tuple[str, ...]:
    return POSITIONS.get(size, POSITIONS[DEFAULT_SIZE])


def seat_index(position: str, seats: Sequence[str]) -> Optional[int]:
    try:
        return list(seats).index(position)
    except ValueError:
        return None


def rotation_from(start: str, seats: Sequence[str]) -> List[str]:
    """All seats clockwise, beginning with ``start``."""
    idx = seat_index(start, seats)
    if idx is None:
        return list(seats)
    return list(seats[idx:]) + list(seats[:idx])


def next_active_seat(after: Optional[str], seats: Sequence[str], active: Collection[str]) -> Optional[str]:
    """First seat clockwise after ``after`` that is in ``active``.

    ``after`` itself may be inactive (e.g. it just folded); the search still
    starts from its chair. Returns None when nobody is active.
    """
    if not seats:
        return None
    idx = seat_index(after, seats) if after is not None else None
    if idx is None:
        idx = len(seats) - 1
    for step in range(1, len(seats) + 1):
        seat = seats[(idx + step) % len(seats)]
        if seat in active:
            return seat
    return None


def first_active_from(start: str, seats: Sequence[str], active: Collection[str]) -> Optional[str]:
    """``start`` when active, otherwise the next active seat clockwise."""
    for seat in rotation_from(start, seats):
        if seat in active:
            return seat
    return None


def seat_after_big_blind(seats: Sequence[str]) -> str:
    idx = seat_index("BB", seats)
    if idx is None:
        return seats[0]
    return seats[(idx + 1) % len(seats)]


def preflop_order(seats: Sequence[str]) -> List[str]:
    """UTG (the seat after the big blind) round to the big blind."""
    return rotation_from(seat_after_big_blind(seats), seats)


def street_opener(preflop: bool, seats: Sequence[str]) -> str:
    if preflop:
        return seat_after_big_blind(seats)
    return "SB" if "SB" in seats else seats[0]


def button_seat(seats: Sequence[str]) -> str:
    # Heads-up has no BTN label: the small blind holds the button.
    return "BTN" if "BTN" in seats else seats[0]

