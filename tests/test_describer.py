from promptcore.schema.types import ColumnMetadata, TableMetadata
from promptcore.semantics.describer import SchemaDescriber
from conftest import FakeSampler


def players(demo_tables):
    return next(t for t in demo_tables if t.name == "tbl_Daily_actions_players")


def test_describe_table_without_sampler_uses_known_values(demo_tables):
    text = SchemaDescriber().describe([players(demo_tables)])

    assert text.startswith("TABLE: common.tbl_Daily_actions_players")
    assert "  Purpose: Player master data" in text
    assert "  Business Context: Player master data table" in text
    assert "    - PlayerID (bigint) [PRIMARY KEY] [NOT NULL] - Unique identifier for a player in the system" in text
    assert "Valid values: 'Active', 'Blocked'" in text


def test_sampler_values_replace_catalogue(demo_tables):
    sampler = FakeSampler(values=["Active", "Blocked", "Closed"])
    d = SchemaDescriber(sampler=sampler, sample_limit=5, sample_timeout=0.5)

    text = d.describe([players(demo_tables)])

    assert "Valid values: 'Active', 'Blocked', 'Closed'" in text
    # only low-cardinality columns are probed
    probed = {c[1] for c in sampler.calls}
    assert "Status" in probed
    assert "PlayerID" not in probed
    assert all(c[2] == "common" and c[3] == 5 and c[4] == 0.5 for c in sampler.calls)


def test_sampler_failure_omits_values(demo_tables):
    d = SchemaDescriber(sampler=FakeSampler(exc=TimeoutError("slow")))

    text = d.describe([players(demo_tables)])

    assert "Valid values" not in text
    assert "    - Status (nvarchar)" in text
    assert d.sample_failures > 0


def test_sample_values_result_carries_error_code(demo_tables):
    d = SchemaDescriber(sampler=FakeSampler(exc=RuntimeError("boom")))
    t = players(demo_tables)

    r = d.sample_values(t, t.column("Status"))

    assert r.ok is False
    assert r.data == []
    assert r.error_code.value == "SAMPLER_FAILED"


def test_column_cap_notes_hidden_columns(demo_tables):
    fact = next(t for t in demo_tables if t.name == "tbl_Daily_actions")
    text = SchemaDescriber(max_columns=5).describe([fact])

    assert f"    ... and {len(fact.columns) - 5} more columns" in text
    assert "DepositsNeteller" not in text


def test_describe_brief():
    t = TableMetadata(
        name="Orders",
        schema="sales",
        columns=tuple(ColumnMetadata(f"c{i}") for i in range(12)),
    )
    assert SchemaDescriber().describe_brief([t], max_columns=3) == "sales.Orders (c0, c1, c2)"


def test_describe_empty_is_empty():
    assert SchemaDescriber().describe([]) == ""
