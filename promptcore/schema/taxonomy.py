"""
Closed table taxonomy for the gaming reporting warehouse.

Tables are classified purely by lower-cased name patterns. The first matching
kind wins, so more specific patterns (players/games variants of the daily
actions table) are excluded from the primary fact pattern explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple, TypeVar


class TableKind(str, Enum):
    PRIMARY_FACT = "primary_fact"
    PLAYER_DIMENSION = "player_dimension"
    GAME_FACT = "game_fact"
    GAME_MASTER = "game_master"
    LOOKUP = "lookup"
    OTHER = "other"


@dataclass(frozen=True)
class NamePattern:
    """Matches a lower-cased table name: any of `any_of`, none of `none_of`."""

    any_of: Tuple[str, ...]
    none_of: Tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        n = name.lower()
        if self.any_of and not any(p in n for p in self.any_of):
            return False
        return not any(p in n for p in self.none_of)

    @classmethod
    def from_dict(cls, raw: dict) -> "NamePattern":
        return cls(
            any_of=tuple(str(p).lower() for p in raw.get("any_of") or ()),
            none_of=tuple(str(p).lower() for p in raw.get("none_of") or ()),
        )


PRIMARY_FACT = NamePattern(("daily_actions",), ("players", "games"))
PLAYER_DIMENSION = NamePattern(("daily_actions_players",))
GAME_FACT = NamePattern(("daily_actions_games",))
GAME_MASTER = NamePattern(("games",), ("daily_actions",))
LOOKUP = NamePattern(("countries", "currencies", "whitelabels"))

TABLE_KINDS: Tuple[Tuple[TableKind, NamePattern], ...] = (
    (TableKind.PRIMARY_FACT, PRIMARY_FACT),
    (TableKind.PLAYER_DIMENSION, PLAYER_DIMENSION),
    (TableKind.GAME_FACT, GAME_FACT),
    (TableKind.GAME_MASTER, GAME_MASTER),
    (TableKind.LOOKUP, LOOKUP),
)

# fact kind -> dimension that must accompany it
COMPANIONS: Dict[TableKind, TableKind] = {
    TableKind.GAME_FACT: TableKind.GAME_MASTER,
}

GAME_KEYWORDS: Tuple[str, ...] = (
    "game",
    "games",
    "gaming",
    "provider",
    "providers",
    "slot",
    "slots",
    "casino",
    "netent",
    "microgaming",
    "pragmatic",
    "evolution",
    "playtech",
    "yggdrasil",
    "gametype",
    "game type",
    "rtp",
    "volatility",
    "jackpot",
    "progressive",
    "table games",
    "live casino",
    "sports betting",
    "virtual",
    "scratch",
    "gamename",
    "game name",
    "gameshow",
    "game show",
    "bingo",
    "keno",
    "realbetamount",
    "realwinamount",
    "bonusbetamount",
    "bonuswinamount",
    "netgamingrevenue",
    "numberofrealbets",
    "numberofbonusbets",
    "numberofrealwins",
    "numberofbonuswins",
    "numberofsessions",
)


def classify_table(name: str) -> TableKind:
    for kind, pattern in TABLE_KINDS:
        if pattern.matches(name):
            return kind
    return TableKind.OTHER


def is_game_query(lower_query: str) -> bool:
    q = (lower_query or "").lower()
    return any(k in q for k in GAME_KEYWORDS)


T = TypeVar("T")


def first_matching(items: Iterable[T], pattern: NamePattern, *, key=lambda t: t.name) -> Optional[T]:
    for item in items:
        if pattern.matches(key(item)):
            return item
    return None


def pattern_for(kind: TableKind) -> Optional[NamePattern]:
    for k, p in TABLE_KINDS:
        if k == kind:
            return p
    return None


def kinds_of(names: Sequence[str]) -> set[TableKind]:
    return {classify_table(n) for n in names}
