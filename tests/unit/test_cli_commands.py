"""Unit tests for CLI commands."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from genomeannot.cli import cli, main
from genomeannot.cli.exit_codes import EXIT_ERROR, EXIT_SIGINT, EXIT_SUCCESS, EXIT_USAGE
from genomeannot.config import save_config
from genomeannot.exceptions import ToolExecutionError


@pytest.fixture
def config_file(make_config, tmp_path):
    """Write a protein-only config file and return a factory for other evidence."""

    def _write(*evidence):
        path = tmp_path / "config.yaml"
        save_config(make_config(*(evidence or ("protein_db",))), path)
        return path

    return _write


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-h"])
        assert result.exit_code == 0
        for command in ("run", "steps", "clean", "build-image", "init-config", "validate"):
            assert command in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-V"])
        assert result.exit_code == 0
        assert "genomeannot" in result.output

    def test_unknown_command_is_usage_error(self):
        assert main(["frobnicate"]) == EXIT_USAGE

    def test_main_success(self):
        assert main(["-V"]) == EXIT_SUCCESS


class TestCLIConfig:
    """init-config command."""

    def test_init_config_stdout(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["init-config", "--stdout"])
        assert result.exit_code == 0
        assert "busco:" in result.output
        assert "evidence:" in result.output

    def test_init_config_output_file(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init-config", "--output-file", "custom.yaml"])
            assert result.exit_code == 0
            data = yaml.safe_load(Path("custom.yaml").read_text())
            assert data["environments"]["runner"] == "conda"


class TestCLIRun:
    """run command."""

    def test_dry_run(self, config_file, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--dry-run", "-c", str(config_file("rna_r1", "rna_r2"))])
        assert result.exit_code == 0, result.output
        assert "mode: ET" in result.output
        assert "star_align" in result.output
        assert "$ STAR --runMode genomeGenerate" in result.output
        assert "7 stage(s) would run" in result.output
        assert not (tmp_path / "work").exists()

    def test_dry_run_warns_about_missing_inputs(self, config_file, inputs):
        path = config_file()
        inputs["genome"].unlink()
        result = CliRunner().invoke(cli, ["run", "--dry-run", "-c", str(path)])
        assert result.exit_code == 0
        assert "input not found" in result.output

    def test_no_evidence(self, make_config, tmp_path):
        path = tmp_path / "config.yaml"
        save_config(make_config(), path)
        result = CliRunner().invoke(cli, ["run", "-c", str(path)])
        assert result.exit_code == EXIT_ERROR
        assert not (tmp_path / "work" / ".stamps").exists()

    def test_unknown_target(self, config_file):
        result = CliRunner().invoke(cli, ["run", "augustus", "-c", str(config_file())])
        assert result.exit_code == EXIT_ERROR

    def test_invalid_threads_is_usage_error(self, config_file):
        result = CliRunner().invoke(cli, ["run", "-t", "0", "-c", str(config_file())])
        assert result.exit_code == EXIT_USAGE

    @patch("genomeannot.external.base.ToolInvoker.invoke", return_value=0)
    def test_single_stage(self, mock_invoke, config_file, tmp_path):
        result = CliRunner().invoke(cli, ["run", "busco", "-c", str(config_file()), "-t", "2"])
        assert result.exit_code == 0, result.output
        assert mock_invoke.call_count == 1
        invocation, stage = mock_invoke.call_args[0]
        assert stage == "busco"
        assert invocation.argv[invocation.argv.index("--cpu") + 1] == "2"
        assert (tmp_path / "work" / ".stamps" / "busco.done").is_file()
        saved = yaml.safe_load((tmp_path / "work" / "genomeannot.config.yaml").read_text())
        assert saved["threads"] == 2

    @patch("genomeannot.external.base.ToolInvoker.invoke")
    def test_tool_failure(self, mock_invoke, config_file, tmp_path):
        mock_invoke.side_effect = ToolExecutionError(
            "busco failed", stage="busco", exit_code=1, log_file=tmp_path / "busco.log"
        )
        result = CliRunner().invoke(cli, ["run", "busco", "-c", str(config_file())])
        assert result.exit_code == EXIT_ERROR
        assert "Pipeline failed: busco failed" in result.output
        assert "Failed stage: busco" in result.output
        assert f"See log: {tmp_path / 'busco.log'}" in result.output
        assert not (tmp_path / "work" / ".stamps" / "busco.done").exists()

    @patch("genomeannot.external.base.ToolInvoker.invoke", return_value=0)
    def test_missing_genome_leaves_no_work_dir(self, mock_invoke, config_file, inputs, tmp_path):
        path = config_file()
        inputs["genome"].unlink()
        result = CliRunner().invoke(cli, ["run", "-c", str(path)])
        assert result.exit_code == EXIT_ERROR
        assert "Pipeline failed: Input file(s) not found" in result.output
        assert "genome.fa" in result.output
        mock_invoke.assert_not_called()
        assert not (tmp_path / "work").exists()

    def test_genome_override(self, config_file, inputs, tmp_path):
        other = tmp_path / "other.fa"
        other.write_text(">x\nA\n")
        result = CliRunner().invoke(
            cli, ["run", "busco", "--dry-run", "-c", str(config_file()), "-g", str(other)]
        )
        assert result.exit_code == 0
        assert f"--in {other}" in result.output

    def test_interrupt_exit_code(self, config_file):
        with patch("genomeannot.cli.commands.run.execute_pipeline", side_effect=KeyboardInterrupt):
            assert main(["run", "-c", str(config_file())]) == EXIT_SIGINT


class TestCLIStepsAndClean:
    """steps and clean commands."""

    def test_steps(self, config_file, tmp_path):
        marker_dir = tmp_path / "work" / ".stamps"
        marker_dir.mkdir(parents=True)
        (marker_dir / "busco.done").write_text("{}")
        result = CliRunner().invoke(cli, ["steps", "-c", str(config_file())])
        assert result.exit_code == 0
        assert "mode: EP" in result.output
        lines = {line.split()[1]: line for line in result.output.splitlines() if "[" in line}
        assert "[done" in lines["busco"]
        assert "[n/a" in lines["star_align"]
        assert "[pending" in lines["braker"]

    def test_clean(self, config_file, tmp_path):
        work = tmp_path / "work"
        (work / ".stamps").mkdir(parents=True)
        (work / ".stamps" / "busco.done").write_text("{}")
        (work / "01_busco_raw").mkdir()
        result = CliRunner().invoke(cli, ["clean", "-c", str(config_file())])
        assert result.exit_code == 0
        assert not (work / ".stamps" / "busco.done").exists()
        assert not (work / "01_busco_raw").exists()

    def test_clean_stage(self, config_file, tmp_path):
        work = tmp_path / "work"
        (work / ".stamps").mkdir(parents=True)
        for name in ("busco", "busco_masked"):
            (work / ".stamps" / f"{name}.done").write_text("{}")
        (work / "04_busco_masked").mkdir()
        result = CliRunner().invoke(cli, ["clean", "--stage", "busco_masked", "-c", str(config_file())])
        assert result.exit_code == 0
        assert "busco_masked" in result.output
        assert (work / ".stamps" / "busco.done").exists()
        assert not (work / ".stamps" / "busco_masked.done").exists()

    def test_clean_all_and_stage_conflict(self, config_file):
        result = CliRunner().invoke(cli, ["clean", "--all", "--stage", "busco", "-c", str(config_file())])
        assert result.exit_code == EXIT_USAGE


class TestCLIImageAndValidate:
    """build-image and validate commands."""

    def test_build_image_noop_when_present(self, config_file):
        with patch("genomeannot.external.base.ToolInvoker.invoke") as mock_invoke:
            result = CliRunner().invoke(cli, ["build-image", "-c", str(config_file())])
        assert result.exit_code == 0
        assert "nothing to do" in result.output
        mock_invoke.assert_not_called()

    def test_build_image(self, config_file, inputs):
        inputs["image"].unlink()
        with patch("genomeannot.external.base.ToolInvoker.invoke", return_value=0) as mock_invoke:
            result = CliRunner().invoke(cli, ["build-image", "-c", str(config_file())])
        assert result.exit_code == 0
        invocation, stage = mock_invoke.call_args[0]
        assert stage == "build-image"
        assert invocation.argv == (
            "apptainer", "build", str(inputs["image"]), "docker://teambraker/braker3:latest",
        )

    def test_validate_missing_tools(self, config_file):
        with patch("genomeannot.utils.dependency_checker.shutil.which", return_value=None):
            result = CliRunner().invoke(cli, ["validate", "-c", str(config_file())])
        assert result.exit_code == EXIT_ERROR
        assert "Missing busco" in result.output

    def test_validate_ok(self, config_file):
        with patch("genomeannot.utils.dependency_checker.shutil.which", return_value="/usr/bin/x"), \
                patch("genomeannot.utils.dependency_checker.get_tool_version", return_value=None):
            result = CliRunner().invoke(cli, ["validate", "-c", str(config_file())])
        assert result.exit_code == 0, result.output
        assert "All checks passed" in result.output
