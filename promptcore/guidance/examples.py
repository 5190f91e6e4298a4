"""Canonical question -> SQL pairs selected by the same keyword triggers as the rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from promptcore.guidance.triggers import Trigger, both, fire, game_topic, has_all, has_any


@dataclass(frozen=True)
class WorkedExample:
    title: str
    sql: str

    def render(self) -> str:
        return f"\nEXAMPLE: '{self.title}'\nSQL: {self.sql}"


GAME_PERFORMANCE_BY_PROVIDER = WorkedExample(
    "game performance by provider",
    """SELECT g.Provider, g.SubProvider, g.GameType,
            SUM(dag.RealBetAmount) AS RealBetAmount,
            SUM(dag.RealWinAmount) AS RealWinAmount,
            SUM(dag.NetGamingRevenue) AS NetGamingRevenue,
            SUM(dag.NumberofRealBets) AS NumberofRealBets
     FROM [DailyActionsDB].[common].[tbl_Daily_actions_games] dag WITH (NOLOCK)
     INNER JOIN dbo.Games g WITH (NOLOCK) ON g.GameID = dag.GameID - 1000000
     WHERE dag.GameDate >= '2025-01-01'
     GROUP BY g.Provider, g.SubProvider, g.GameType
     ORDER BY NetGamingRevenue DESC""",
)

TOP_GAMES_BY_REVENUE = WorkedExample(
    "top games by revenue",
    """SELECT TOP 10 g.GameName, g.Provider, g.GameType,
            SUM(dag.RealBetAmount) AS TotalBets,
            SUM(dag.RealWinAmount) AS TotalWins,
            SUM(dag.NetGamingRevenue) AS NetRevenue
     FROM [DailyActionsDB].[common].[tbl_Daily_actions_games] dag WITH (NOLOCK)
     INNER JOIN dbo.Games g WITH (NOLOCK) ON g.GameID = dag.GameID - 1000000
     WHERE dag.GameDate >= DATEADD(day, -7, CAST(GETDATE() AS DATE))
     GROUP BY g.GameName, g.Provider, g.GameType
     ORDER BY NetRevenue DESC""",
)

TOP_GAMES_THIS_MONTH = WorkedExample(
    "top 10 games by revenue this month",
    """SELECT TOP 10 g.GameName, g.Provider, g.GameType,
            SUM(dag.NetGamingRevenue) AS TotalRevenue,
            SUM(dag.RealBetAmount) AS TotalBets,
            SUM(dag.NumberofSessions) AS TotalSessions
     FROM [DailyActionsDB].[common].[tbl_Daily_actions_games] dag WITH (NOLOCK)
     INNER JOIN dbo.Games g WITH (NOLOCK) ON g.GameID = dag.GameID - 1000000
     WHERE dag.GameDate >= DATEADD(MONTH, DATEDIFF(MONTH, 0, GETDATE()), 0)
       AND dag.GameDate < DATEADD(MONTH, DATEDIFF(MONTH, 0, GETDATE()) + 1, 0)
     GROUP BY g.GameName, g.Provider, g.GameType
     ORDER BY TotalRevenue DESC""",
)

TOTALS_TODAY = WorkedExample(
    "totals today",
    """SELECT SUM(Deposits) as TotalDeposits, COUNT(DISTINCT PlayerID) as PlayerCount
     FROM common.tbl_Daily_actions
     WHERE Date = CAST(GETDATE() AS DATE)""",
)

TOP_PLAYERS_BY_DEPOSITS = WorkedExample(
    "Top 10 players by deposits in the last 7 days",
    """SELECT TOP 10 da.PlayerID, SUM(da.Deposits) as TotalDeposits
     FROM common.tbl_Daily_actions da WITH (NOLOCK)
     WHERE da.Date >= DATEADD(day, -7, CAST(GETDATE() AS DATE))
     GROUP BY da.PlayerID
     ORDER BY TotalDeposits DESC""",
)

DEPOSITS_BY_BRAND = WorkedExample(
    "deposits by brand today",
    """SELECT da.WhiteLabelID, SUM(da.Deposits) as TotalDeposits, COUNT(DISTINCT da.PlayerID) as PlayerCount
     FROM common.tbl_Daily_actions da WITH (NOLOCK)
     WHERE da.Date = CAST(GETDATE() AS DATE)
     GROUP BY da.WhiteLabelID
     ORDER BY TotalDeposits DESC""",
)

PLAYER_ACTIVITY_TODAY = WorkedExample(
    "player activity today",
    """SELECT da.PlayerID, p.Username, SUM(da.Deposits) as TotalDeposits, SUM(da.BetsReal + da.BetsBonus) as TotalBets
     FROM common.tbl_Daily_actions da WITH (NOLOCK)
     JOIN common.tbl_Daily_actions_players p WITH (NOLOCK) ON da.PlayerID = p.PlayerID
     WHERE da.Date = CAST(GETDATE() AS DATE)
     GROUP BY da.PlayerID, p.Username
     ORDER BY TotalDeposits DESC""",
)

REVENUE_BY_COUNTRY = WorkedExample(
    "revenue by country today",
    """SELECT c.CountryName, SUM(da.Deposits) as Revenue, COUNT(DISTINCT da.PlayerID) as Players
     FROM common.tbl_Daily_actions da WITH (NOLOCK)
     JOIN common.tbl_Daily_actions_players p WITH (NOLOCK) ON da.PlayerID = p.PlayerID
     JOIN common.tbl_Countries c WITH (NOLOCK) ON p.CountryID = c.CountryID
     WHERE da.Date = CAST(GETDATE() AS DATE)
     GROUP BY c.CountryName
     ORDER BY Revenue DESC""",
)

BONUS_TOTALS = WorkedExample(
    "bonus totals",
    """SELECT SUM(Amount) as TotalBonusAmount, COUNT(*) as BonusCount,
            AVG(Amount) as AverageBonusAmount
     FROM common.tbl_Bonus_balances WITH (NOLOCK)
     WHERE Status = 'Active'""",
)

REVENUE_BY_BRAND = WorkedExample(
    "revenue by brand today",
    """SELECT w.Name as BrandName, SUM(da.Deposits) as Revenue, COUNT(DISTINCT da.PlayerID) as Players
     FROM common.tbl_Daily_actions da WITH (NOLOCK)
     JOIN common.tbl_Whitelabels w WITH (NOLOCK) ON da.WhitelabelID = w.WhitelabelID
     WHERE da.Date = CAST(GETDATE() AS DATE)
     GROUP BY w.Name
     ORDER BY Revenue DESC""",
)

SUSPENDED_PLAYERS_BY_BRAND = WorkedExample(
    "suspended players by brand",
    """SELECT wl.LabelName AS Brand, COUNT(DISTINCT dap.PlayerID) AS BlockedPlayers
     FROM common.tbl_Daily_actions_players dap WITH (NOLOCK)
     JOIN common.tbl_White_labels wl WITH (NOLOCK) ON dap.CasinoID = wl.LabelID
     WHERE dap.Status = 'Blocked'
     GROUP BY wl.LabelName
     ORDER BY BlockedPlayers DESC""",
)

PLAYERS_BY_STATUS = WorkedExample(
    "players by status last 7 days",
    """SELECT dap.Status, COUNT(DISTINCT dap.PlayerID) AS PlayerCount
     FROM common.tbl_Daily_actions da WITH (NOLOCK)
     JOIN common.tbl_Daily_actions_players dap WITH (NOLOCK) ON da.PlayerID = dap.PlayerID
     WHERE da.Date >= DATEADD(DAY, -7, CAST(GETDATE() AS DATE))
     GROUP BY dap.Status
     ORDER BY PlayerCount DESC""",
)

BASIC_DAILY_STATISTICS = WorkedExample(
    "basic daily statistics",
    """SELECT Date, SUM(Deposits) as TotalDeposits, COUNT(DISTINCT PlayerID) as PlayerCount
     FROM common.tbl_Daily_actions WITH (NOLOCK)
     WHERE Date >= DATEADD(day, -7, CAST(GETDATE() AS DATE))
     GROUP BY Date
     ORDER BY Date DESC""",
)

EXAMPLE_TRIGGERS: Tuple[Trigger[WorkedExample], ...] = (
    Trigger(
        "game",
        game_topic,
        (GAME_PERFORMANCE_BY_PROVIDER, TOP_GAMES_BY_REVENUE, TOP_GAMES_THIS_MONTH),
    ),
    Trigger("totals_today", has_all("total", "today"), (TOTALS_TODAY,)),
    Trigger("top_players_deposits", has_all("top", "player", "deposit"), (TOP_PLAYERS_BY_DEPOSITS,)),
    Trigger(
        "deposits_by_brand",
        both(has_any("deposit"), has_any("brand", "whitelabel")),
        (DEPOSITS_BY_BRAND,),
    ),
    Trigger("player_today", has_all("player", "today"), (PLAYER_ACTIVITY_TODAY,)),
    Trigger("country", has_any("country", "region"), (REVENUE_BY_COUNTRY,)),
    Trigger("bonus", has_any("bonus"), (BONUS_TOTALS,)),
    Trigger("brand", has_any("brand", "whitelabel"), (REVENUE_BY_BRAND,)),
    Trigger(
        "status",
        has_any("status", "suspended", "blocked"),
        (SUSPENDED_PLAYERS_BY_BRAND, PLAYERS_BY_STATUS),
    ),
)

DEFAULT_EXAMPLES: Tuple[WorkedExample, ...] = (BASIC_DAILY_STATISTICS,)


def select_examples(
    query: str, triggers: Sequence[Trigger[WorkedExample]] = EXAMPLE_TRIGGERS
) -> List[WorkedExample]:
    picked = fire(triggers, query, key=lambda e: e.title)
    return picked if picked else list(DEFAULT_EXAMPLES)


def render_examples(examples: Sequence[WorkedExample]) -> str:
    return "\n".join(e.render() for e in examples)
