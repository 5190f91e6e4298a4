import pytest

from promptcore.schema.taxonomy import TableKind, classify_table, is_game_query


@pytest.mark.parametrize(
    "name,kind",
    [
        ("tbl_Daily_actions", TableKind.PRIMARY_FACT),
        ("tbl_Daily_actions_players", TableKind.PLAYER_DIMENSION),
        ("tbl_Daily_actions_games", TableKind.GAME_FACT),
        ("Games", TableKind.GAME_MASTER),
        ("tbl_Countries", TableKind.LOOKUP),
        ("tbl_Currencies", TableKind.LOOKUP),
        ("tbl_Whitelabels", TableKind.LOOKUP),
        ("tbl_Bonus_balances", TableKind.OTHER),
    ],
)
def test_classify_table(name, kind):
    assert classify_table(name) == kind


@pytest.mark.parametrize(
    "query,expected",
    [
        ("top games by revenue this month", True),
        ("netgamingrevenue per provider", True),
        ("total deposits today", False),
        ("", False),
    ],
)
def test_is_game_query(query, expected):
    assert is_game_query(query) is expected
