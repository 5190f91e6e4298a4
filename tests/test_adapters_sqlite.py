import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.sampler.sqlite_sampler import SQLiteSampler
from adapters.store.sqlite_store import SQLiteStore
from promptcore.learning.types import FeedbackEntry
from promptcore.prompts.types import PromptDetails, PromptTemplate
from promptcore.prompts.analytics import build_generation_record


@pytest.fixture
def demo_db(tmp_path):
    path = tmp_path / "demo.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE tbl_Daily_actions_players (
            PlayerID INTEGER PRIMARY KEY,
            Username TEXT NOT NULL,
            Status TEXT
        );
        CREATE TABLE tbl_Daily_actions (
            ID INTEGER PRIMARY KEY,
            PlayerID INTEGER REFERENCES tbl_Daily_actions_players (PlayerID),
            Date TEXT NOT NULL,
            Deposits REAL
        );
        INSERT INTO tbl_Daily_actions_players VALUES
            (1, 'ana', 'Active'), (2, 'bo', 'Blocked'), (3, 'cy', 'Active'), (4, 'dee', NULL);
        """
    )
    conn.commit()
    conn.close()
    return str(path)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


def test_sqlite_catalog_reads_tables_and_keys(demo_db):
    tables = {t.name: t for t in SQLiteCatalog(demo_db).get_schema()}

    assert set(tables) == {"tbl_Daily_actions", "tbl_Daily_actions_players"}
    fact = tables["tbl_Daily_actions"]
    assert fact.schema == "main"
    assert fact.column("ID").is_primary_key
    assert fact.column("PlayerID").is_foreign_key
    assert fact.column("Date").is_nullable is False
    assert fact.column("Deposits").data_type == "REAL"


def test_sqlite_catalog_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        SQLiteCatalog(str(tmp_path / "nope.db")).get_schema()


# ---------------------------------------------------------------------------
# Sampler
# ---------------------------------------------------------------------------


def test_sqlite_sampler_distinct_sorted_non_null(demo_db):
    values = SQLiteSampler(demo_db).sample_distinct_values(
        "tbl_Daily_actions_players", "Status", schema="common", limit=10
    )
    assert values == ["Active", "Blocked"]


def test_sqlite_sampler_limit(demo_db):
    values = SQLiteSampler(demo_db).sample_distinct_values(
        "tbl_Daily_actions_players", "Username", limit=2
    )
    assert values == ["ana", "bo"]


def test_sqlite_sampler_skips_empty_and_long_values(tmp_path):
    path = tmp_path / "codes.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE codes (Code TEXT)")
    rows = ["", " ", "A" * 80] + [f"S{i}" for i in range(10)]
    conn.executemany("INSERT INTO codes VALUES (?)", [(r,) for r in rows])
    conn.commit()
    conn.close()

    values = SQLiteSampler(str(path)).sample_distinct_values("codes", "Code", limit=10)

    assert values == [" "] + [f"S{i}" for i in range(9)]
    assert "" not in values
    assert "A" * 80 not in values


def test_sqlite_sampler_deadline_interrupts(tmp_path):
    path = tmp_path / "big.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE t (v INTEGER);
        WITH RECURSIVE n(i) AS (SELECT 1 UNION ALL SELECT i + 1 FROM n WHERE i < 5000)
        INSERT INTO t SELECT i FROM n;
        """
    )
    conn.commit()
    conn.close()

    # deadline already passed when the first progress check runs
    with pytest.raises(sqlite3.OperationalError):
        SQLiteSampler(str(path)).sample_distinct_values("t", "v", limit=10, timeout=-1.0)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    s = SQLiteStore(":memory:")
    yield s
    s.close()


def test_template_upsert_and_usage(store):
    saved = store.save(PromptTemplate(name="sql_generation", version="1.0", content="A"))
    assert saved.id is not None

    again = store.save(saved.with_changes(content="B", description="edited"))
    assert again.id == saved.id
    assert again.content == "B"

    store.increment_usage(saved.id)
    store.increment_usage(saved.id)
    assert store.get_template("sql_generation").usage_count == 2


def test_template_versions_and_inactive(store):
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    store.save(PromptTemplate(name="t", version="1.0", content="one", created_at=base))
    store.save(
        PromptTemplate(name="t", version="2.0", content="two", created_at=base + timedelta(days=1))
    )
    store.save(
        PromptTemplate(
            name="t", version="3.0", content="off", is_active=False, created_at=base + timedelta(days=2)
        )
    )

    assert store.get_template("t", "1.0").content == "one"
    assert store.get_template("t").content == "two"
    assert store.get_template("t", "3.0") is None
    assert store.find_template("t", "3.0").content == "off"
    assert [x.version for x in store.list_templates()] == ["2.0", "1.0"]


def test_prompt_log(store):
    details = PromptDetails(
        full_prompt="x" * 400,
        template_name="sql_generation",
        template_version="2.0",
        sections=[],
        variables={},
        token_count=100,
    )
    store.log_prompt_generation(build_generation_record("total deposits", details, ["tbl_Daily_actions"]))

    assert store.count_prompt_logs() == 1


def test_feedback_newest_first_with_filter(store):
    now = datetime.now(timezone.utc)
    for i, cat in enumerate(["count_query", "display_query", "count_query"]):
        store.append_feedback(
            FeedbackEntry(
                original_query=f"q{i}",
                generated_sql="SELECT 1",
                rating=5,
                category=cat,
                user_id="u",
                created_at=now + timedelta(seconds=i),
            )
        )

    rows = store.query_feedback("count_query")
    assert [r.original_query for r in rows] == ["q2", "q0"]
    assert rows[0].created_at == now + timedelta(seconds=2)
    assert len(store.query_feedback(limit=1)) == 1
    assert len(store.query_feedback()) == 3
