"""Poker hand engine: evaluator, betting replay and pot settlement."""

from .betting import BettingRound, complete_preflop, folded_positions
from .cards import Card, RANKS, SUITS, parse_label, try_parse_label
from .evaluator import HandCategory, HandEvaluation, determine_winner, evaluate_best, evaluate_labels
from .models import ActionEntry, ActionKind, HandInput, PlayerEntry, Pot, PotShare, Street, TableConfig
from .record import HandRecord, build_record, dumps, loads, record_from_dict, record_to_dict
from .settlement import Settlement, contributions, pot_total, settle
from .table import positions_for
from .validation import HandValidationError, validate_hand

__all__ = [
    "BettingRound",
    "complete_preflop",
    "folded_positions",
    "Card",
    "RANKS",
    "SUITS",
    "parse_label",
    "try_parse_label",
    "HandCategory",
    "HandEvaluation",
    "determine_winner",
    "evaluate_best",
    "evaluate_labels",
    "ActionEntry",
    "ActionKind",
    "HandInput",
    "PlayerEntry",
    "Pot",
    "PotShare",
    "Street",
    "TableConfig",
    "HandRecord",
    "build_record",
    "dumps",
    "loads",
    "record_from_dict",
    "record_to_dict",
    "Settlement",
    "contributions",
    "pot_total",
    "settle",
    "positions_for",
    "HandValidationError",
    "validate_hand",
]
