import pytest

from adapters.catalog.static import StaticCatalog
from adapters.store.memory import InMemoryPromptLog
from conftest import BrokenTemplateStore
from promptcore.pipeline import PromptPipeline
from promptcore.prompts.assembler import PromptAssembler
from promptcore.prompts.templates import TemplateManager


class FailingCatalog:
    name = "broken"

    def get_schema(self):
        raise ConnectionError("catalogue unavailable")


class FailingAnalyzer:
    def analyze(self, query):
        raise RuntimeError("analyzer down")


class FailingScorer:
    class weights:
        fallback_table_count = 2

    def select(self, tables, query, analysis=None):
        raise RuntimeError("scorer bug")


def stages(traces):
    return [t["stage"] for t in traces]


def test_run_top_games_scenario(demo_tables):
    p = PromptPipeline(catalog=StaticCatalog(demo_tables))

    res = p.run(query="top games by revenue this month")

    assert res.fallback is False
    assert res.schema.selection_strategy == "scored"
    assert "tbl_Daily_actions_games" in res.schema.table_names
    assert "Games" in res.schema.table_names
    assert "tbl_Daily_actions_games.GameID = Games.GameID" in res.schema.suggested_joins
    assert "revenue" in res.schema.business_terms
    assert "CRITICAL: For game analytics" in res.prompt.full_prompt
    assert "EXAMPLE: 'top games by revenue'" in res.prompt.full_prompt
    assert stages(res.traces) == ["catalog", "analyzer", "relevance", "assemble"]


def test_run_empty_query_with_twenty_tables(many_tables):
    p = PromptPipeline(catalog=StaticCatalog(many_tables))

    res = p.run(query="")

    assert res.schema.selection_strategy == "default"
    assert res.schema.table_names == [
        "tbl_Daily_actions",
        "tbl_Daily_actions_players",
        "tbl_Countries",
    ]
    assert "EXAMPLE: 'basic daily statistics'" in res.prompt.full_prompt
    assert "- Use tbl_Daily_actions as primary table for statistical queries" in res.prompt.full_prompt


def test_template_store_unreachable(demo_tables):
    sink = InMemoryPromptLog()
    p = PromptPipeline(
        catalog=StaticCatalog(demo_tables),
        assembler=PromptAssembler(templates=TemplateManager(BrokenTemplateStore()), log_sink=sink),
    )

    prompt = p.build_query_prompt("total deposits today")

    assert "USER QUESTION: total deposits today" in prompt
    assert len(sink.records) == 1


def test_catalog_failure_gives_empty_schema():
    p = PromptPipeline(catalog=FailingCatalog())
    traces = []

    ctx = p.get_relevant_schema("top players", traces=traces)

    assert ctx.relevant_tables == []
    assert ctx.selection_strategy == "empty"
    assert traces[0]["stage"] == "catalog"
    assert traces[0]["summary"] == "failed"


def test_analyzer_failure_keeps_keyword_scoring(demo_tables):
    p = PromptPipeline(catalog=StaticCatalog(demo_tables), analyzer=FailingAnalyzer())

    ctx = p.get_relevant_schema("top players by deposits")

    assert ctx.selection_strategy == "scored"
    assert ctx.table_names[0] == "tbl_Daily_actions"
    assert ctx.business_terms == []


def test_scorer_failure_takes_first_tables(demo_tables):
    p = PromptPipeline(catalog=StaticCatalog(demo_tables), scorer=FailingScorer())

    ctx = p.get_relevant_schema("anything")

    assert ctx.selection_strategy == "fallback"
    assert ctx.table_names == [t.name for t in demo_tables[:2]]


def test_explicit_tables_bypass_catalog(demo_tables):
    p = PromptPipeline(catalog=FailingCatalog())

    ctx = p.get_relevant_schema("bonus totals", demo_tables)

    assert "tbl_Bonus_balances" in ctx.table_names


def test_detailed_prompt_with_explicit_schema(demo_tables):
    p = PromptPipeline()
    details = p.build_detailed_query_prompt("player status", demo_tables[1:2], "active only")

    assert details.section("schema").metadata["tableCount"] == 1
    assert details.section("context").content == "\nAdditional context: active only"


def test_template_passthrough():
    p = PromptPipeline()
    assert p.list_templates() == []
    assert p.stats() == {"sample_failures": 0}


def test_off_topic_game_tables_stay_out_with_analyzer(demo_tables):
    schema = PromptPipeline().get_relevant_schema("show daily actions today", demo_tables)

    assert schema.table_names == ["tbl_Daily_actions", "tbl_Daily_actions_players"]
    assert schema.scores["tbl_Daily_actions_games"] == pytest.approx(0.2)
    assert schema.forced_tables == []
