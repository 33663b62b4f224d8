"""
Tests for export filename sanitization.
"""

import os

import pytest

from sheetbridge.services.filename import munge_filename, sanitize_filename


class TestMungeFilename:
    """Tests for munge_filename."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("report.xlsx", "report.xlsx"),
            ("report.php.xls", "report.php_.xls"),
            ("report.csv.xlsx", "report.csv.xlsx"),
            ("archive.tar.gz.ods", "archive.tar_.gz_.ods"),
            ("version.2024.csv", "version.2024.csv"),
            ("a:b*c?.xlsx", "a_b_c_.xlsx"),
        ],
    )
    def test_munge(self, filename: str, expected: str) -> None:
        """Test unsafe characters and intermediate extensions."""
        assert munge_filename(filename) == expected

    def test_custom_allow_list(self) -> None:
        """Test that extensions in the allow-list are kept."""
        assert munge_filename("data.php.xls", "php xls") == "data.php.xls"


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    def test_directory_is_preserved(self) -> None:
        """Test that only the base name is sanitized."""
        path = os.path.join("some.dir", "sub", "out.exe.xlsx")

        assert sanitize_filename(path) == os.path.join("some.dir", "sub", "out.exe_.xlsx")

    def test_bare_filename(self) -> None:
        """Test a path without a directory part."""
        assert sanitize_filename("out<1>.csv") == "out_1_.csv"
