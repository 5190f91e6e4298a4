from adapters.store.memory import InMemoryPromptLog, InMemoryTemplateStore
from conftest import BrokenTemplateStore
from promptcore.prompts.assembler import FALLBACK_PROMPT, PromptAssembler, substitute
from promptcore.prompts.templates import TemplateManager
from promptcore.prompts.types import PromptTemplate
from promptcore.schema.types import SchemaContext


class RecordingMetrics:
    def __init__(self):
        self.fallbacks = []
        self.builds = []

    def observe_stage_duration_ms(self, *, stage, dt_ms):
        pass

    def inc_stage_call(self, *, stage, ok):
        pass

    def inc_stage_error(self, *, stage, error_code):
        pass

    def inc_fallback(self, *, stage, reason):
        self.fallbacks.append((stage, reason))

    def inc_prompt_build(self, *, status):
        self.builds.append(status)

    def inc_cache_event(self, *, hit):
        pass


class ExplodingDescriber:
    sample_failures = 0

    def describe(self, tables):
        raise RuntimeError("describe exploded")

    def describe_brief(self, tables, max_columns=None):
        return "BRIEF"


def game_tables(demo_tables):
    return [t for t in demo_tables if t.name in ("tbl_Daily_actions_games", "Games")]


def test_substitute_is_single_pass():
    out = substitute("{question} | {schema}", {"{question}": "{schema}", "{schema}": "S"})
    assert out == "{schema} | S"


def test_builds_sections_in_order(demo_tables):
    details = PromptAssembler().build_detailed_query_prompt(
        "top games by revenue this month", game_tables(demo_tables), "EUR only"
    )

    assert [s.name for s in details.sections] == [
        "template",
        "user_question",
        "schema",
        "business_rules",
        "examples",
        "context",
    ]
    schema = details.section("schema")
    assert schema.metadata["tableCount"] == 2
    assert schema.metadata["totalColumns"] == sum(len(t.columns) for t in game_tables(demo_tables))
    assert details.template_name == "sql_generation"
    assert "USER QUESTION: top games by revenue this month" in details.full_prompt
    assert "Additional context: EUR only" in details.full_prompt
    assert "TABLE: dbo.Games" in details.full_prompt
    assert "{schema}" not in details.full_prompt
    assert details.token_count == (len(details.full_prompt) + 3) // 4


def test_no_context_section_without_context(demo_tables):
    details = PromptAssembler().build_detailed_query_prompt("total deposits today", demo_tables[:1])

    assert details.section("context") is None
    assert details.variables["{context}"] == ""


def test_accepts_schema_context(demo_tables):
    ctx = SchemaContext(relevant_tables=demo_tables[:2])
    prompt = PromptAssembler().build_query_prompt("player status", ctx)

    assert "tbl_Daily_actions_players" in prompt


def test_template_store_unreachable_still_contains_query(demo_tables):
    metrics = RecordingMetrics()
    asm = PromptAssembler(templates=TemplateManager(BrokenTemplateStore()), metrics=metrics)

    prompt = asm.build_query_prompt("total deposits today", demo_tables[:1])

    assert "total deposits today" in prompt
    assert ("template", "default") in metrics.fallbacks
    assert metrics.builds == ["ok"]


def test_describe_failure_falls_back_to_brief(demo_tables):
    metrics = RecordingMetrics()
    asm = PromptAssembler(describer=ExplodingDescriber(), metrics=metrics)

    details = asm.build_detailed_query_prompt("deposits", demo_tables[:1])

    assert details.section("schema").content == "BRIEF"
    assert ("describe", "brief") in metrics.fallbacks


def test_rules_failure_uses_defaults(demo_tables):
    def broken_rules(query):
        raise ValueError("bad rules")

    details = PromptAssembler(rules_for=broken_rules).build_detailed_query_prompt(
        "anything", demo_tables[:1]
    )

    assert details.section("business_rules").content.startswith(
        "- Use tbl_Daily_actions as primary table"
    )


def test_examples_failure_uses_default_example(demo_tables, monkeypatch):
    def broken_examples(query):
        raise RuntimeError("bad triggers")

    monkeypatch.setattr("promptcore.prompts.assembler.select_examples", broken_examples)
    metrics = RecordingMetrics()

    details = PromptAssembler(metrics=metrics).build_detailed_query_prompt(
        "top games by revenue", demo_tables[:1]
    )

    assert "basic daily statistics" in details.section("examples").content
    assert ("examples", "default") in metrics.fallbacks


def test_never_raises_and_uses_fallback_prompt(demo_tables, monkeypatch):
    metrics = RecordingMetrics()
    asm = PromptAssembler(metrics=metrics)
    monkeypatch.setattr(asm, "_template", lambda version: None)

    details = asm.build_detailed_query_prompt("total deposits today", demo_tables[:1], "ctx")

    assert details.template_name == "fallback"
    assert [s.name for s in details.sections] == ["fallback"]
    assert "USER QUESTION: total deposits today" in details.full_prompt
    assert "ADDITIONAL CONTEXT: ctx" in details.full_prompt
    assert details.token_count > 0
    assert ("assemble", "exception") in metrics.fallbacks
    assert metrics.builds == ["fallback"]


def test_fallback_prompt_shape(demo_tables):
    text = PromptAssembler().fallback_prompt("q?", demo_tables[:1])

    assert text.startswith(FALLBACK_PROMPT.split("{schema}")[0])
    assert "USER QUESTION: q?" in text
    assert "{context}" not in text


def test_custom_template_from_store(demo_tables):
    store = InMemoryTemplateStore(
        [PromptTemplate(name="sql_generation", version="9", content="Q={question} S={schema}")]
    )
    prompt = PromptAssembler(templates=TemplateManager(store)).build_query_prompt(
        "count players", demo_tables[:1]
    )

    assert prompt.startswith("Q=count players S=TABLE: common.tbl_Daily_actions")


def test_generation_logged(demo_tables):
    sink = InMemoryPromptLog()
    details = PromptAssembler(log_sink=sink).build_detailed_query_prompt(
        "show total revenue", demo_tables[:2], "ctx"
    )

    assert len(sink.records) == 1
    rec = sink.records[0]
    assert rec.user_query == "show total revenue"
    assert rec.tables_used == ["tbl_Daily_actions", "tbl_Daily_actions_players"]
    assert rec.token_count == details.token_count
    assert rec.intent == "REPORTING"
    assert rec.domain == "Sales"
    assert 0.0 <= rec.confidence_score <= 1.0


def test_log_sink_failure_does_not_break_build(demo_tables):
    class BrokenSink:
        def log_prompt_generation(self, record):
            raise ConnectionError("db down")

    details = PromptAssembler(log_sink=BrokenSink()).build_detailed_query_prompt(
        "deposits", demo_tables[:1]
    )
    assert details.template_name == "sql_generation"
