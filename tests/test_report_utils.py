"""Unit tests for utils/report_utils.py"""

import json
import sys
from pathlib import Path
from unittest.mock import patch

_python_dir = Path(__file__).parent.parent / "python"
if str(_python_dir.absolute()) not in sys.path:
    sys.path.insert(0, str(_python_dir.absolute()))

from utils.report_utils import add_timestamp_to_path, build_deletion_report, get_timestamp_suffix, save_json


class TestTimestamps:
    """Tests for timestamped report paths"""

    def test_timestamp_suffix_format(self):
        """Test the suffix is YYYY-MM-DD-HH-MM-SS"""
        suffix = get_timestamp_suffix()
        parts = suffix.split("-")
        assert len(parts) == 6
        assert all(part.isdigit() for part in parts)

    def test_add_timestamp_before_extension(self):
        """Test the timestamp goes between stem and suffix"""
        result = add_timestamp_to_path("reports/untagged.json", "2026-01-15-14-30-00")
        assert result == str(Path("reports") / "untagged-2026-01-15-14-30-00.json")

    def test_add_generated_timestamp(self):
        """Test a timestamp is generated when none is given"""
        with patch("utils.report_utils.get_timestamp_suffix", return_value="2026-02-01-00-00-00"):
            assert add_timestamp_to_path("out.json") == "out-2026-02-01-00-00-00.json"


class TestBuildDeletionReport:
    """Tests for build_deletion_report"""

    def test_report_fields(self):
        """Test the summary carries repository, ids and count"""
        report = build_deletion_report("acme/widgets", [3, 1])

        assert report["repository"] == "acme/widgets"
        assert report["deleted_versions"] == [3, 1]
        assert report["count"] == 2
        assert "timestamp" in report

    def test_empty_report(self):
        """Test a run that removed nothing"""
        report = build_deletion_report("acme/widgets", [])
        assert report["deleted_versions"] == []
        assert report["count"] == 0


class TestSaveJson:
    """Tests for save_json"""

    def test_creates_parent_directories(self, tmp_path):
        """Test missing directories are created"""
        path = tmp_path / "nested" / "dir" / "report.json"

        saved = save_json(str(path), {"count": 1})

        assert saved == str(path)
        assert json.loads(path.read_text()) == {"count": 1}

    def test_timestamped_filename(self, tmp_path):
        """Test timestamp=True inserts the timestamp into the filename"""
        with patch("utils.report_utils.get_timestamp_suffix", return_value="2026-03-04-05-06-07"):
            saved = save_json(str(tmp_path / "report.json"), [1, 2], timestamp=True)

        assert saved == str(tmp_path / "report-2026-03-04-05-06-07.json")
        assert json.loads(Path(saved).read_text()) == [1, 2]
