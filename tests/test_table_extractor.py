"""
End-to-end tests for TableExtractor.

Tests cover:
- Full document output and compact row streams
- Selection by position and by id
- Global vs. per-file table numbering
- Unreadable inputs and stdin
"""

import io
import json
import pytest
from pathlib import Path
from psv.tables.data_models import ExtractionSettings, TableIndexScope
from psv.tables.table_extractor import TableExtractor


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "tables"
PEOPLE_FILE = str(FIXTURES_DIR / "people.md")
DOCUMENT_FILE = str(FIXTURES_DIR / "document.md")
EMPTY_FILE = str(FIXTURES_DIR / "empty_file.md")


def run(inputs, stdin=None, **settings):
    """Run an extraction and return (output text, report)."""
    extractor = TableExtractor(inputs, ExtractionSettings(**settings), stdin=stdin)
    stream = io.StringIO()
    report = extractor.write(stream)
    return stream.getvalue(), report


class TestFullOutput:
    """Test full document mode."""

    def test_people_example(self):
        """Should render the people table as a one-element array."""
        output, report = run([PEOPLE_FILE])
        assert json.loads(output) == [{
            "id": "people",
            "headers": ["Name", "Age [integer]"],
            "keys": ["name", "age"],
            "data_annotation": [[], ["integer"]],
            "rows": [
                {"name": "Ann", "age": 30},
                {"name": "Bo", "age": None},
            ],
        }]
        assert report.failed == 0
        assert report.tables_emitted == 1
        assert report.rows_emitted == 2

    def test_document_with_rejected_block(self):
        """Should find both real tables and skip the rejected candidate."""
        output, report = run([DOCUMENT_FILE])
        documents = json.loads(output)

        assert [doc["id"] for doc in documents] == ["table1", "spells"]
        assert documents[0]["keys"] == ["item", "count", "price", "in_stock"]
        assert documents[0]["rows"] == [
            {"item": "Sword", "count": 3, "price": 15.5, "in_stock": True},
            {"item": "Shield", "count": 0, "price": 10.0, "in_stock": False},
            {"item": "Rope | 50ft", "count": 12, "price": 1.25, "in_stock": True},
        ]
        assert documents[1]["rows"][1] == {
            "spell_name": "Magic Missile", "level": 1, "school": None,
        }
        assert report.tables_seen == 2

    def test_omit_null(self):
        """Should drop absent cells from row objects."""
        output, _ = run([PEOPLE_FILE], omit_null=True)
        assert json.loads(output)[0]["rows"][1] == {"name": "Bo"}

    def test_empty_input(self):
        """Should print an empty array when there are no tables."""
        output, report = run([EMPTY_FILE])
        assert json.loads(output) == []
        assert report.failed == 0

    def test_output_is_indented(self):
        """Should pretty-print full documents."""
        output, _ = run([PEOPLE_FILE])
        assert output.startswith("[\n  {")
        assert output.endswith("\n")


class TestCompactOutput:
    """Test compact (JSON Lines) mode."""

    def test_people_rows(self):
        """Should print one compact object per row."""
        output, _ = run([PEOPLE_FILE], compact=True)
        assert output == '{"name":"Ann","age":30}\n{"name":"Bo","age":null}\n'

    def test_rows_from_all_tables(self):
        """Should stream rows of every table in order."""
        output, report = run([DOCUMENT_FILE], compact=True)
        lines = [json.loads(line) for line in output.splitlines()]
        assert len(lines) == 5
        assert lines[0]["item"] == "Sword"
        assert lines[-1]["spell_name"] == "Magic Missile"
        assert report.rows_emitted == 5

    def test_compact_omit_null(self):
        """Should combine compact mode with omit-null."""
        output, _ = run([PEOPLE_FILE], compact=True, omit_null=True)
        assert output.splitlines()[1] == '{"name":"Bo"}'


class TestSelection:
    """Test table selection by position and id."""

    def test_select_by_position(self):
        """Should print only the selected table, not wrapped in an array."""
        output, _ = run([DOCUMENT_FILE], table_position=2)
        document = json.loads(output)
        assert document["id"] == "spells"

    def test_position_out_of_range(self):
        """Should print nothing when the position does not exist."""
        output, report = run([PEOPLE_FILE], table_position=2)
        assert output == ""
        assert report.failed == 0

    def test_select_by_id(self):
        """Should select the first table with the given id."""
        output, _ = run([DOCUMENT_FILE], table_id="spells")
        assert json.loads(output)["keys"] == ["spell_name", "level", "school"]

    def test_select_by_default_id(self):
        """Should match position-derived ids too."""
        output, _ = run([DOCUMENT_FILE], table_id="table1")
        assert json.loads(output)["keys"][0] == "item"

    def test_unknown_id(self):
        """Should print nothing for an unknown id."""
        output, _ = run([DOCUMENT_FILE], table_id="missing")
        assert output == ""

    def test_stops_after_match(self):
        """Should not read further inputs once the table was found."""
        _, report = run([PEOPLE_FILE, DOCUMENT_FILE], table_id="people")
        assert [r.source for r in report.results] == [PEOPLE_FILE]

    def test_compact_selection(self):
        """Should stream only the selected table's rows."""
        output, _ = run([DOCUMENT_FILE], compact=True, table_id="spells")
        assert [json.loads(line)["spell_name"] for line in output.splitlines()] == [
            "Fireball", "Magic Missile",
        ]

    def test_unselected_tables_not_counted_as_emitted(self):
        """Should skip unselected tables without emitting their rows."""
        _, report = run([DOCUMENT_FILE], table_position=2)
        assert report.tables_seen == 2
        assert report.tables_emitted == 1
        assert report.rows_emitted == 2


class TestIndexScope:
    """Test table numbering across inputs."""

    def test_global_numbering(self):
        """Should count positions across files by default."""
        output, _ = run([PEOPLE_FILE, DOCUMENT_FILE])
        assert [doc["id"] for doc in json.loads(output)] == ["people", "table2", "spells"]

    def test_per_file_numbering(self):
        """Should restart positions for every file."""
        output, _ = run([PEOPLE_FILE, DOCUMENT_FILE], index_scope=TableIndexScope.PER_FILE)
        assert [doc["id"] for doc in json.loads(output)] == ["people", "table1", "spells"]

    def test_global_position_selection(self):
        """Should select by global position."""
        output, _ = run([PEOPLE_FILE, DOCUMENT_FILE], table_position=2)
        assert json.loads(output)["keys"][0] == "item"

    def test_per_file_position_selection(self):
        """Should select the first matching position in any file."""
        output, _ = run(
            [PEOPLE_FILE, DOCUMENT_FILE],
            table_position=2,
            index_scope=TableIndexScope.PER_FILE,
        )
        assert json.loads(output)["id"] == "spells"


class TestInputs:
    """Test input handling."""

    def test_missing_file_recorded(self, tmp_path):
        """Should record a missing file and keep processing the rest."""
        missing = str(tmp_path / "missing.md")
        output, report = run([missing, PEOPLE_FILE])

        assert [doc["id"] for doc in json.loads(output)] == ["people"]
        assert report.failed == 1
        assert report.failures[0].source == missing
        assert "File not found" in report.failures[0].error_message

    def test_stdin(self):
        """Should read stdin for '-'."""
        stdin = io.StringIO("| x |\n|---|\n| 1 |\n")
        output, report = run(["-"], stdin=stdin)
        assert json.loads(output)[0]["rows"] == [{"x": "1"}]
        assert report.results[0].source == "<stdin>"

    def test_no_inputs_reads_stdin(self):
        """Should default to stdin when no files are given."""
        extractor = TableExtractor(stdin=io.StringIO(""))
        assert extractor.inputs == ["-"]

    def test_legacy_line_consumption(self):
        """Should drop the id line that ends a table in legacy mode."""
        text = "| a |\n|---|\n| 1 |\n{#b}\n| b |\n|---|\n"
        output, _ = run(["-"], stdin=io.StringIO(text))
        assert [doc["id"] for doc in json.loads(output)] == ["table1", "b"]

        output, _ = run(["-"], stdin=io.StringIO(text), legacy_line_consumption=True)
        assert [doc["id"] for doc in json.loads(output)] == ["table1", "table2"]


class TestIterTables:
    """Test the lazy table iterator."""

    def test_iter_full_tables(self):
        """Should yield tables with rows loaded."""
        extractor = TableExtractor([PEOPLE_FILE])
        tables = [(t.id, t.num_rows) for t in extractor.iter_full_tables()]
        assert tables == [("people", 2)]

    def test_unread_rows_are_skipped(self):
        """Should move past rows the caller did not pull."""
        extractor = TableExtractor([DOCUMENT_FILE])
        ids = [table.id for table in extractor.iter_tables()]
        assert ids == ["table1", "spells"]
        assert extractor.report.rows_emitted == 0

    def test_partial_row_pull(self):
        """Should allow pulling only some rows lazily."""
        extractor = TableExtractor([DOCUMENT_FILE])
        first_rows = []
        for table in extractor.iter_tables():
            first_rows.append(next(iter(extractor.rows(table)))[0])
        assert first_rows == ["Sword", "Fireball"]
