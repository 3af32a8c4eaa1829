"""Tests for the CSV staging load."""

import pytest

from cycleload.ingestion.normalizer import RawRecord
from cycleload.ingestion.staging import (
    StagingLoadError,
    count_staged,
    preview_staged,
    read_raw_rows,
    stage_csv,
)

HEADER = [
    '"";"pojemność";"średnica";"grubość";"Obróbka cieplna',
    'CYKL [s]";"OEE";"uwagi";""',
]


class TestReadRawRows:
    def test_multiline_header_is_one_record(self, write_export):
        path = write_export(HEADER + [";5;140-141;2,8;42,5;;;"])
        rows = list(read_raw_rows(path, "cp1250"))
        assert rows == [
            (1, RawRecord(None, "5", "140-141", "2,8", "42,5", None, None, None))
        ]

    def test_fields_trimmed_and_blank_rows_skipped(self, write_export):
        path = write_export(
            HEADER
            + [
                ";;;;;;;",
                " x ; 5 ;  ;;;; uwaga ;",
                "   ;  ",
                ";;100;;;;;",
            ]
        )
        rows = list(read_raw_rows(path, "cp1250"))
        assert [num for num, _ in rows] == [2, 4]
        first = rows[0][1]
        assert first.col1 == "x"
        assert first.capacity == "5"
        assert first.diameter is None
        assert first.notes == "uwaga"

    def test_ragged_and_surplus_columns(self, write_export):
        path = write_export(HEADER + [";5", ";1;2;3;4;5;6;7;8;9"])
        rows = [raw for _, raw in read_raw_rows(path, "cp1250")]
        assert rows[0].capacity == "5"
        assert rows[0].thickness is None
        assert rows[1].extra == "7"

    def test_utf8_export(self, write_export):
        path = write_export(["a;b", ";;;;;;średnica ok;"], encoding="utf-8")
        rows = list(read_raw_rows(path, "utf-8"))
        assert rows[0][1].notes == "średnica ok"

    def test_custom_header_rows(self, write_export):
        path = write_export(["title", "subtitle", ";7"])
        rows = list(read_raw_rows(path, "utf-8", header_rows=2))
        assert rows[0][1].capacity == "7"

    def test_header_only_file(self, write_export):
        path = write_export(HEADER)
        assert list(read_raw_rows(path, "cp1250")) == []

    def test_unknown_encoding(self, write_export):
        path = write_export(HEADER)
        with pytest.raises(ValueError, match="Unknown encoding"):
            list(read_raw_rows(path, "no-such-codec"))


class TestStageCsv:
    def test_stage_and_count(self, db_service, write_export):
        path = write_export(
            HEADER + [";5;140-141;2,8;42,5;;;", "", ";;;;;;only notes;", ";;100;;;;;"]
        )
        total = stage_csv(db_service, path, "cp1250", chunk_size=2)
        assert total == 3
        assert count_staged(db_service) == 3

        rows = preview_staged(db_service, limit=2)
        assert [r["row_num"] for r in rows] == [1, 3]
        assert rows[0]["diameter"] == "140-141"
        assert rows[0]["col1"] is None
        assert rows[1]["notes"] == "only notes"

    def test_restage_replaces_previous_rows(self, db_service, write_export):
        path = write_export(HEADER + [";1", ";2"])
        stage_csv(db_service, path, "cp1250")
        stage_csv(db_service, path, "cp1250")
        assert count_staged(db_service) == 2

    def test_custom_staging_table(self, db_service, write_export):
        path = write_export(HEADER + [";1"])
        stage_csv(db_service, path, "cp1250", table="stg_en600")
        assert count_staged(db_service, "stg_en600") == 1

    def test_missing_file(self, db_service, tmp_path):
        with pytest.raises(StagingLoadError, match="Failed to stage"):
            stage_csv(db_service, tmp_path / "missing.csv", "cp1250")

    def test_wrong_encoding(self, db_service, tmp_path):
        path = tmp_path / "cycles.csv"
        path.write_bytes("h\n;;;;;;pojemność;\n".encode("cp1250"))
        with pytest.raises(StagingLoadError):
            stage_csv(db_service, path, "utf-8")

    def test_invalid_table_name(self, db_service, write_export):
        path = write_export(HEADER)
        with pytest.raises(ValueError, match="Invalid table name"):
            stage_csv(db_service, path, "cp1250", table="stg; DROP TABLE x")
