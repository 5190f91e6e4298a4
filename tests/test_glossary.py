import pytest

from promptcore.semantics.glossary import (
    column_business_meaning,
    is_low_cardinality,
    known_field_values,
    render_values,
    table_business_context,
)


def test_table_context_exact_then_fallback():
    assert table_business_context("tbl_Daily_actions").startswith("Main statistics table")
    assert table_business_context("tbl_Daily_summary") == "Daily aggregated data for reporting and analytics"
    assert table_business_context("Invoices") == ""


@pytest.mark.parametrize(
    "column,expected",
    [
        ("Deposits", "Total deposit amount for this player on this date"),
        ("TotalPayout", "Aggregated sum value"),
        ("SessionID", "Unique identifier or foreign key reference"),
        ("Nickname", ""),
    ],
)
def test_column_meaning(column, expected):
    assert column_business_meaning(column) == expected


@pytest.mark.parametrize(
    "table,column,expected",
    [
        ("tbl_Daily_actions_players", "Status", "'Active', 'Blocked'"),
        ("tbl_Bonus_balances", "Status", "'Active', 'Expired', 'Used', 'Cancelled', 'Pending'"),
        ("Games", "Provider", "'NetEnt', 'Microgaming', 'Pragmatic Play', 'Evolution', 'Playtech', 'Yggdrasil', 'Play n GO', 'Red Tiger'"),
        ("tbl_Currencies", "CurrencyID", ""),
        ("tbl_Whitelabels", "IsActive", "0 (false), 1 (true)"),
        ("Orders", "Status", ""),
    ],
)
def test_known_field_values(table, column, expected):
    assert known_field_values(table, column) == expected


def test_low_cardinality_detection():
    assert is_low_cardinality("Status")
    assert is_low_cardinality("GameType")
    assert not is_low_cardinality("Deposits")


def test_render_values_quotes_each():
    assert render_values(["A", "B"]) == "'A', 'B'"
