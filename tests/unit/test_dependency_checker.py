"""Tests for the dependency checker."""

from unittest.mock import MagicMock, patch

from genomeannot.config import EnvironmentConfig
from genomeannot.utils.dependency_checker import (
    DependencyChecker,
    compare_versions,
    get_tool_version,
)


class TestVersionHelpers:
    """Version parsing and comparison."""

    def test_compare_versions(self):
        assert compare_versions("5.4.7", "5.0")
        assert compare_versions("2.7.10b", "2.7")
        assert not compare_versions("1.9", "1.10")

    def test_unparseable_passes(self):
        assert compare_versions("unknown", "1.0")

    @patch("genomeannot.utils.dependency_checker.subprocess.run")
    def test_get_tool_version(self, mock_run):
        mock_run.return_value = MagicMock(stdout="BUSCO 5.4.7\n", stderr="")
        assert get_tool_version("busco") == "5.4.7"

    @patch("genomeannot.utils.dependency_checker.subprocess.run", side_effect=FileNotFoundError)
    def test_get_tool_version_missing(self, mock_run):
        assert get_tool_version("busco") is None


class TestDependencyChecker:
    """Which executables are required for each runner."""

    def test_conda_runner_needs_only_conda(self):
        checker = DependencyChecker(EnvironmentConfig(runner="conda"))
        assert [t.name for t in checker.tools()] == ["conda"]

    def test_path_tools_without_alignment(self):
        checker = DependencyChecker(EnvironmentConfig(runner="none"), needs_alignment=False)
        names = [t.name for t in checker.tools()]
        assert "busco" in names
        assert "apptainer" in names
        assert "STAR" not in names

    def test_path_tools_with_alignment(self):
        checker = DependencyChecker(EnvironmentConfig(runner="none"), needs_alignment=True)
        names = [t.name for t in checker.tools()]
        assert "STAR" in names
        assert "samtools" in names

    @patch("genomeannot.utils.dependency_checker.shutil.which", return_value=None)
    def test_missing(self, mock_which):
        checker = DependencyChecker(EnvironmentConfig(runner="micromamba"))
        assert not checker.check_all()
        assert [t.name for t in checker.missing_required] == ["micromamba"]
        assert any("Missing micromamba" in line for line in checker.report_lines())

    @patch("genomeannot.utils.dependency_checker.get_tool_version", return_value="1.5")
    @patch("genomeannot.utils.dependency_checker.shutil.which", return_value="/usr/bin/tool")
    def test_old_version_warns(self, mock_which, mock_version):
        checker = DependencyChecker(EnvironmentConfig(runner="none"), needs_alignment=False)
        assert checker.check_all()
        assert any(w.startswith("busco: version 1.5") for w in checker.version_warnings)

    @patch("genomeannot.utils.dependency_checker.shutil.which", return_value="/usr/bin/conda")
    def test_missing_image_is_a_note(self, mock_which, tmp_path):
        checker = DependencyChecker(EnvironmentConfig(), image=tmp_path / "braker3.sif")
        assert checker.check_all()
        assert "build-image" in checker.notes[0]
