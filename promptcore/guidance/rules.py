"""Keyword-triggered business rules injected into the prompt."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from promptcore.guidance.triggers import (
    Trigger,
    both,
    fire,
    game_topic,
    has_all,
    has_any,
    lacks,
)

_last_period = both(has_any("last"), has_any("day", "week"))
_seven_days = has_any("7 days", "week")
_thirty_days = has_any("30 days", "month")

RULE_TRIGGERS: Tuple[Trigger[str], ...] = (
    Trigger(
        "game_analytics",
        game_topic,
        (
            "CRITICAL: For game analytics, use tbl_Daily_actions_games as the primary table",
            "CRITICAL: ALWAYS join with Games table using: INNER JOIN dbo.Games g WITH (NOLOCK) ON g.GameID = dag.GameID - 1000000",
            "CRITICAL: NEVER show GameID numbers - ALWAYS show GameName from Games table",
            "Games table contains: GameName, Provider, SubProvider, GameType - use these for readable results",
            "Gaming metrics: RealBetAmount, RealWinAmount, BonusBetAmount, BonusWinAmount, NetGamingRevenue",
            "Count metrics: NumberofRealBets, NumberofBonusBets, NumberofSessions, NumberofRealWins, NumberofBonusWins",
            "For game analysis: SELECT g.GameName, g.Provider, g.GameType and GROUP BY these fields",
            "Use SUM() for all gaming amount and count metrics",
            "NetGamingRevenue = total bets - total wins (house edge calculation)",
            "MANDATORY: Include Games table join for any query mentioning 'games', 'top games', or 'game performance'",
        ),
    ),
    Trigger(
        "today",
        has_any("today"),
        (
            "For 'today': Use WHERE Date = CAST(GETDATE() AS DATE) or WHERE GameDate = CAST(GETDATE() AS DATE)",
            "Focus on tbl_Daily_actions as the primary source for today's data",
        ),
    ),
    Trigger(
        "totals",
        has_any("total", "sum"),
        (
            "For 'totals': Use SUM() aggregation on Amount columns",
            "Consider grouping by relevant dimensions (PlayerID, WhitelabelID, CountryID)",
        ),
    ),
    Trigger(
        "last_7_days",
        both(_last_period, _seven_days),
        ("For 'last 7 days' or 'last week': Use WHERE Date >= DATEADD(day, -7, CAST(GETDATE() AS DATE))",),
    ),
    Trigger(
        "last_30_days",
        both(_last_period, lacks(_seven_days), _thirty_days),
        ("For 'last 30 days' or 'last month': Use WHERE Date >= DATEADD(day, -30, CAST(GETDATE() AS DATE))",),
    ),
    Trigger(
        "last_3_days",
        both(_last_period, lacks(_seven_days), lacks(_thirty_days), has_any("3 days")),
        ("For 'last 3 days': Use WHERE Date >= DATEADD(day, -3, CAST(GETDATE() AS DATE))",),
    ),
    Trigger(
        "date_column",
        _last_period,
        ("Always use Date column from tbl_Daily_actions or GameDate from tbl_Daily_actions_games for date filtering",),
    ),
    Trigger(
        "deposits",
        has_any("deposit"),
        (
            "CRITICAL: For deposit queries, ALWAYS use 'Deposits' column from tbl_Daily_actions, NEVER use 'Amount'",
            "CRITICAL: The column name is 'Deposits' (capital D), not 'deposits' or 'Amount'",
            "For deposit totals: SUM(da.Deposits) - use this exact syntax",
            "Deposits are financial amounts in the player's currency",
        ),
    ),
    Trigger(
        "top_players",
        has_all("top", "player"),
        (
            "For 'top players' queries: Use ORDER BY with the relevant metric DESC and LIMIT/TOP clause",
            "Join tbl_Daily_actions with tbl_Daily_actions_players for player names when needed",
            "Use SUM() aggregation for deposit amounts when showing top players by deposits",
        ),
    ),
    Trigger(
        "players",
        has_any("player"),
        (
            "For player data: JOIN tbl_Daily_actions with tbl_Daily_actions_players on PlayerID",
            "Include player demographics from tbl_Daily_actions_players when relevant",
        ),
    ),
    Trigger(
        "bonus",
        has_any("bonus"),
        (
            "For bonus data: JOIN with tbl_Bonus_balances using BonusBalanceID",
            "Bonus amounts are stored in tbl_Bonus_balances.Amount",
        ),
    ),
    Trigger(
        "geography",
        has_any("country", "region"),
        (
            "For geographical analysis: JOIN with countries table using CountryID",
            "Use country names for better readability in results",
        ),
    ),
    Trigger(
        "currency",
        has_any("currency"),
        (
            "For currency analysis: JOIN with currencies table using CurrencyID",
            "Include currency codes in results for clarity",
        ),
    ),
    Trigger(
        "brand",
        has_any("brand", "operator", "whitelabel"),
        (
            "For brand analysis: JOIN with whitelabels table using WhitelabelID",
            "Include whitelabel names for business context",
        ),
    ),
    Trigger(
        "status_values",
        has_any("status", "active", "suspended", "blocked"),
        (
            "CRITICAL: For player status queries, only 'Active' and 'Blocked' are valid values in this database",
            "CRITICAL: When user asks for 'suspended' players, use 'Blocked' status instead",
            "CRITICAL: Status values are case-sensitive strings: 'Active' or 'Blocked' only",
            "CRITICAL: Use the exact values shown in the schema - they may vary by table",
            "Example: WHERE Status = 'Blocked' (for suspended/blocked players)",
            "Example: WHERE Status = 'Active' (for active players)",
        ),
    ),
    Trigger(
        "payment_methods",
        has_any("payment", "method"),
        ("For payment methods: Use 'CreditCard', 'Neteller', 'MoneyBookers', 'Skrill', 'PayPal', 'BankTransfer', 'Crypto', 'Other'",),
    ),
    Trigger(
        "suspended_terminology",
        has_any("suspended", "suspend"),
        (
            "TERMINOLOGY MAPPING: 'Suspended' players should be queried using Status = 'Blocked'",
            "CRITICAL: Never use 'Suspended' as a status value - it doesn't exist in this database",
            "CRITICAL: Replace any reference to 'suspended' with 'Blocked' in WHERE clauses",
        ),
    ),
    Trigger(
        "game_types",
        both(has_any("game"), has_any("type", "category")),
        ("For game types: Use 'Slot', 'Table', 'Live', 'Sports', 'Virtual', 'Scratch', 'Bingo', 'Keno', 'Poker'",),
    ),
)

DEFAULT_RULES: Tuple[str, ...] = (
    "Use tbl_Daily_actions as primary table for statistical queries",
    "JOIN with reference tables (players, countries, currencies, whitelabels) for context",
    "Use appropriate aggregations (SUM, COUNT, AVG) based on the question",
    "CRITICAL: Always use exact field values as shown in schema - they are case-sensitive",
)


def business_rules_for(query: str, triggers: Sequence[Trigger[str]] = RULE_TRIGGERS) -> List[str]:
    rules = fire(triggers, query)
    return rules if rules else list(DEFAULT_RULES)


def render_rules(rules: Sequence[str]) -> str:
    if not rules:
        return ""
    return "- " + "\n- ".join(rules)
