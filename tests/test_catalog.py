"""Track catalog loading and reference data validation."""

import copy
from pathlib import Path

import pytest

from career_engine.data_processing.catalog_loader import TrackCatalog, load_data, skills_to_frame
from career_engine.data_processing.data_validator import CatalogValidator
from career_engine.models.errors import InvalidTrackDefinition
from tests.conftest import SKILL_RECORDS, TRACK_RECORDS, write_jsonl


class TestLoadData:
    def test_skips_blank_and_malformed_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "records.jsonl"
        path.write_text('{"a": 1}\n\nnot json\n{"a": 2}\n', encoding="utf-8")
        assert load_data(path) == [{"a": 1}, {"a": 2}]

    def test_missing_file_gives_no_records(self, tmp_path: Path) -> None:
        assert load_data(tmp_path / "absent.jsonl") == []

    def test_skill_frame_normalises_columns(self) -> None:
        df = skills_to_frame([{"skill_id": "go", "name": "Go", "base_hours": "25"}])
        row = df.iloc[0]
        assert row["category"] == "General"
        assert row["base_hours"] == 25
        assert row["aliases"] == []
        assert not row["project_worthy"]


class TestTrackCatalog:
    def test_lists_tracks_in_file_order(self, catalog: TrackCatalog) -> None:
        assert [t.id for t in catalog.list_tracks()] == ["web-dev", "backend-dev", "data-analyst"]

    def test_get_track(self, catalog: TrackCatalog) -> None:
        assert catalog.get_track("data-analyst").title == "Data Analyst"
        assert catalog.get_track("astronaut") is None

    def test_empty_track_file_gives_empty_catalog(self, data_dir: Path) -> None:
        write_jsonl(data_dir / "career_tracks.jsonl", [])
        catalog = TrackCatalog(data_dir / "career_tracks.jsonl", data_dir / "skills.jsonl")
        assert catalog.list_tracks() == []

    def test_out_of_range_weight_is_rejected(self, data_dir: Path) -> None:
        records = copy.deepcopy(TRACK_RECORDS)
        records[1]["required_skills"][0]["weight"] = 11
        write_jsonl(data_dir / "career_tracks.jsonl", records)
        catalog = TrackCatalog(data_dir / "career_tracks.jsonl", data_dir / "skills.jsonl")
        with pytest.raises(InvalidTrackDefinition) as excinfo:
            catalog.list_tracks()
        assert excinfo.value.track_id == "backend-dev"

    def test_reload_picks_up_changes(self, data_dir: Path, catalog: TrackCatalog) -> None:
        assert len(catalog.list_tracks()) == 3
        write_jsonl(data_dir / "career_tracks.jsonl", TRACK_RECORDS[:1])
        assert len(catalog.list_tracks()) == 3
        assert [t.id for t in catalog.reload()] == ["web-dev"]

    def test_invalid_skill_table_raises(self, data_dir: Path) -> None:
        write_jsonl(data_dir / "skills.jsonl", [{"skill_id": "x", "name": "X", "category": "General", "base_hours": -3}])
        catalog = TrackCatalog(data_dir / "career_tracks.jsonl", data_dir / "skills.jsonl")
        with pytest.raises(RuntimeError):
            catalog.skills_frame()


class TestCatalogValidator:
    def setup_method(self) -> None:
        self.validator = CatalogValidator()

    def test_reference_skills_are_valid_with_hour_warning(self) -> None:
        result = self.validator.validate_skills(SKILL_RECORDS)
        assert result.is_valid
        assert any("'sql'" in warning for warning in result.warnings)
        assert result.stats["valid_records"] == len(SKILL_RECORDS)

    def test_duplicate_skill_ids(self) -> None:
        result = self.validator.validate_skills(SKILL_RECORDS + SKILL_RECORDS[:1])
        assert not result.is_valid
        assert result.stats["duplicate_skills"] == 1

    def test_unknown_and_repeated_track_skills(self) -> None:
        record = {"id": "t", "title": "T", "required_skills": [
            {"skill_id": "js", "weight": 5},
            {"skill_id": "js", "weight": 3},
            {"skill_id": "cobol", "weight": 4},
        ]}
        result = self.validator.validate_tracks([record], ["js"])
        assert not result.is_valid
        assert any("listed twice" in e for e in result.errors)
        assert result.stats["unknown_skills"]["cobol"] == 1

    def test_zero_and_fractional_weights_rejected(self) -> None:
        record = {"id": "t", "title": "T", "required_skills": [
            {"skill_id": "js", "weight": 0},
            {"skill_id": "react", "weight": 2.5},
        ]}
        result = self.validator.validate_tracks([record], ["js", "react"])
        assert result.stats["invalid_weights"] == 2

    def test_report_mentions_status_and_errors(self) -> None:
        result = self.validator.validate_tracks([{"id": "t", "title": "T", "required_skills": []}], [])
        report = self.validator.generate_validation_report(result, title="Career Track Catalog")
        assert "Career Track Catalog: INVALID (0/1 records usable)" in report
        assert "1 error(s):" in report
        assert "required_skills must be a non-empty list" in report
