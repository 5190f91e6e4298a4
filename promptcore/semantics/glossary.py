"""
Business vocabulary for the reporting warehouse.

Every lookup is an ordered table: exact (lower-cased) names first, then
substring fallbacks in declaration order. A miss yields an empty string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

TABLE_CONTEXT: Dict[str, str] = {
    "tbl_daily_actions": "Main statistics table holding all player statistics aggregated by player by day. Core table for daily reporting and player activity analysis.",
    "tbl_daily_actions_players": "Player master data table containing all player information, demographics, and account details.",
    "tbl_daily_actions_games": "Game-specific daily statistics table holding gaming metrics by player by game by day. Contains RealBetAmount, RealWinAmount, BonusBetAmount, BonusWinAmount, NetGamingRevenue, and session counts.",
    "games": "Games master table containing game metadata including GameName, Provider, SubProvider, GameType. Join with tbl_Daily_actions_games using GameID - 1000000.",
    "tbl_bonus_balances": "Tracks bonus amounts and balances for players, linked to daily actions that trigger bonus calculations.",
    "whitelabels": "Metadata table defining different casino brands/operators within the platform.",
    "countries": "Reference table for country codes, names, and geographical information for player segmentation.",
    "currencies": "Reference table for supported currencies, exchange rates, and currency-specific business rules.",
}

TABLE_CONTEXT_FALLBACKS: Tuple[Tuple[str, str], ...] = (
    ("daily", "Daily aggregated data for reporting and analytics"),
    ("player", "Player-related information and demographics"),
    ("bonus", "Bonus and promotional data"),
    ("balance", "Financial balance and transaction data"),
)

COLUMN_MEANING: Dict[str, str] = {
    "id": "Primary key - unique record identifier",
    "playerid": "Unique identifier for a player in the system",
    "date": "Business date (not timestamp) when the activity occurred",
    "whitelabelid": "Casino brand/operator identifier (correct spelling)",
    "registration": "Number of new player registrations on this date",
    "ftd": "First Time Deposit - number of players making their first deposit",
    "ftda": "First Time Deposit Amount - total amount of first deposits",
    "deposits": "Total deposit amount for this player on this date",
    "depositscreditcard": "Deposits made via credit card",
    "depositsneteller": "Deposits made via Neteller",
    "depositsmoneybookers": "Deposits made via MoneyBookers (Skrill)",
    "depositsother": "Deposits made via other payment methods",
    "cashoutrequests": "Total amount of withdrawal requests",
    "paidcashouts": "Total amount of paid withdrawals",
    "chargebacks": "Chargeback amounts",
    "bonuses": "Total bonus amounts awarded",
    "collectedbonuses": "Bonus amounts actually collected by players",
    "expiredbonuses": "Bonus amounts that expired",
    "betsreal": "Real money bets placed",
    "betsbonus": "Bonus money bets placed",
    "winsreal": "Real money winnings",
    "winsbonus": "Bonus money winnings",
    "betssport": "Sports betting amounts",
    "winssport": "Sports betting winnings",
    "betscasino": "Casino game betting amounts",
    "winscasino": "Casino game winnings",
    "amount": "Financial value in the player's currency",
    "totalamount": "Sum of all financial values",
    "bonusbalanceid": "Links to specific bonus balance record",
    "countryid": "Player's country for geographical analysis",
    "currencyid": "Currency used for this transaction/player",
    "actiontype": "Type of player activity (deposit, bet, withdrawal, etc.)",
    "userid": "Same as PlayerID - unique player identifier",
    "registrationdate": "When the player first registered",
    "lastlogindate": "Most recent player login timestamp",
    "status": "Current player status - ONLY 'Active' or 'Blocked' are valid (use 'Blocked' for suspended players)",
    "balance": "Current account balance",
    "totaldeposits": "Lifetime sum of all deposits",
    "totalwithdraws": "Lifetime sum of all withdrawals",
    "totalbets": "Lifetime sum of all bets placed",
    "totalwins": "Lifetime sum of all winnings",
}

COLUMN_MEANING_FALLBACKS: Tuple[Tuple[str, str], ...] = (
    ("total", "Aggregated sum value"),
    ("count", "Number of occurrences"),
    ("date", "Date/timestamp field"),
    ("deposits", "Deposit-related financial amount"),
    ("bets", "Betting-related amount"),
    ("wins", "Winnings-related amount"),
    ("bonus", "Bonus-related amount"),
)

ID_SUFFIX_MEANING = "Unique identifier or foreign key reference"


@dataclass(frozen=True)
class ValueRule:
    """Static literal values for a column when no live sampler is configured."""

    rendered: str
    column_exact: Tuple[str, ...] = ()
    column_contains: Tuple[str, ...] = ()
    column_excludes: Tuple[str, ...] = ()
    table_contains: Tuple[str, ...] = ()

    def matches(self, table: str, column: str) -> bool:
        hit = column in self.column_exact or any(p in column for p in self.column_contains)
        if not hit:
            return False
        if any(p in column for p in self.column_excludes):
            return False
        return not self.table_contains or any(p in table for p in self.table_contains)


KNOWN_VALUES: Tuple[ValueRule, ...] = (
    ValueRule("'Active', 'Blocked'", column_exact=("status",), table_contains=("player",)),
    ValueRule(
        "'Active', 'Expired', 'Used', 'Cancelled', 'Pending'",
        column_exact=("status",),
        table_contains=("bonus",),
    ),
    ValueRule(
        "'Completed', 'Pending', 'Failed', 'Cancelled', 'Processing'",
        column_exact=("status",),
        table_contains=("transaction",),
    ),
    ValueRule(
        "'CreditCard', 'Neteller', 'MoneyBookers', 'Skrill', 'PayPal', 'BankTransfer', 'Crypto', 'Other'",
        column_contains=("paymentmethod", "payment_method"),
    ),
    ValueRule(
        "'Deposit', 'Withdrawal', 'Bet', 'Win', 'Bonus', 'Registration', 'Login'",
        column_exact=("actiontype", "action_type"),
    ),
    ValueRule(
        "'Slot', 'Table', 'Live', 'Sports', 'Virtual', 'Scratch', 'Bingo', 'Keno', 'Poker'",
        column_exact=("gametype", "game_type"),
    ),
    ValueRule(
        "'USD', 'EUR', 'GBP', 'CAD', 'AUD', 'SEK', 'NOK', 'DKK', 'CHF', 'JPY'",
        column_contains=("currency",),
        column_excludes=("id",),
    ),
    ValueRule("0 (false), 1 (true)", column_contains=("active", "enabled", "verified")),
    ValueRule(
        "'M', 'F', 'Male', 'Female', 'Other', 'Unknown'", column_exact=("gender", "sex")
    ),
    ValueRule(
        "'Bronze', 'Silver', 'Gold', 'Platinum', 'Diamond', 'VIP1', 'VIP2', 'VIP3'",
        column_contains=("vip", "level", "tier"),
    ),
    ValueRule("'Low', 'Medium', 'High', 'Critical'", column_contains=("risk",)),
    ValueRule(
        "'Real', 'Demo', 'Bonus', 'Test'",
        column_exact=("type",),
        column_contains=("accounttype",),
    ),
    ValueRule(
        "'Verified', 'Pending', 'Rejected', 'NotRequired'",
        column_contains=("verification", "kyc"),
    ),
    ValueRule(
        "'NetEnt', 'Microgaming', 'Pragmatic Play', 'Evolution', 'Playtech', 'Yggdrasil', 'Play n GO', 'Red Tiger'",
        column_exact=("provider",),
        table_contains=("game",),
    ),
    ValueRule(
        "'en', 'de', 'fr', 'es', 'it', 'sv', 'no', 'da', 'fi'",
        column_contains=("language", "locale"),
    ),
)

# columns likely to hold a small closed set of literals
SAMPLED_EXACT = ("status", "gender", "currency", "provider")
SAMPLED_CONTAINS = ("type", "method", "category", "level", "tier")


def table_business_context(table_name: str) -> str:
    name = (table_name or "").lower()
    if name in TABLE_CONTEXT:
        return TABLE_CONTEXT[name]
    for needle, text in TABLE_CONTEXT_FALLBACKS:
        if needle in name:
            return text
    return ""


def column_business_meaning(column_name: str) -> str:
    name = (column_name or "").lower()
    if name in COLUMN_MEANING:
        return COLUMN_MEANING[name]
    for needle, text in COLUMN_MEANING_FALLBACKS:
        if needle in name:
            return text
    if name.endswith("id"):
        return ID_SUFFIX_MEANING
    return ""


def known_field_values(table_name: str, column_name: str) -> str:
    table = (table_name or "").lower()
    column = (column_name or "").lower()
    for rule in KNOWN_VALUES:
        if rule.matches(table, column):
            return rule.rendered
    return ""


def is_low_cardinality(column_name: str) -> bool:
    name = (column_name or "").lower()
    return name in SAMPLED_EXACT or any(p in name for p in SAMPLED_CONTAINS)


def render_values(values: List[str]) -> str:
    return ", ".join(f"'{v}'" for v in values)
