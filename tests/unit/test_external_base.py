"""Tests for the external tool invoker."""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from genomeannot.config import EnvironmentConfig
from genomeannot.exceptions import MissingEnvironmentError, ToolExecutionError
from genomeannot.external.base import ExternalTool, Invocation, ToolInvoker


def python_invocation(code, tmp_path, **kwargs):
    kwargs.setdefault("log_file", tmp_path / "logs" / "tool.log")
    return Invocation(tool="python", argv=(sys.executable, "-c", code), **kwargs)


class TestRunnerPrefix:
    """Command construction for each environment runner."""

    def test_conda(self):
        invoker = ToolInvoker(EnvironmentConfig(runner="conda", annotation="annot"))
        inv = Invocation(tool="busco", argv=("busco", "--help"), environment="annotation")
        assert invoker.command_for(inv) == [
            "conda", "run", "--no-capture-output", "-n", "annot", "busco", "--help",
        ]

    def test_micromamba(self):
        invoker = ToolInvoker(EnvironmentConfig(runner="micromamba", rnaseq="rna"))
        inv = Invocation(tool="STAR", argv=("STAR",), environment="rnaseq")
        assert invoker.command_for(inv) == ["micromamba", "run", "-n", "rna", "STAR"]

    def test_none(self):
        invoker = ToolInvoker(EnvironmentConfig(runner="none"))
        inv = Invocation(tool="busco", argv=("busco",), environment="annotation")
        assert invoker.command_for(inv) == ["busco"]

    def test_container_wrapping(self):
        invoker = ToolInvoker(EnvironmentConfig(runner="conda", apptainer="appt"))
        inv = Invocation(
            tool="braker.pl",
            argv=("braker.pl", "--genome=/g/genome.fa"),
            environment="apptainer",
            image=Path("/img/braker3.sif"),
            binds=((Path("/g"), Path("/g")), (Path("/w"), Path("/w"))),
        )
        assert invoker.render(inv) == (
            "conda run --no-capture-output -n appt apptainer exec --no-home "
            "--bind /g:/g --bind /w:/w /img/braker3.sif braker.pl --genome=/g/genome.fa"
        )


class TestInvoke:
    """Real subprocess execution with runner 'none'."""

    def setup_method(self):
        self.invoker = ToolInvoker(EnvironmentConfig(runner="none"))

    def test_success_streams_output_to_log(self, tmp_path):
        inv = python_invocation(
            "import sys; print('to stdout'); print('to stderr', file=sys.stderr)", tmp_path
        )
        assert self.invoker.invoke(inv, "busco") == 0
        log = (tmp_path / "logs" / "tool.log").read_text()
        assert log.startswith("$ ")
        assert "to stdout" in log
        assert "to stderr" in log

    def test_append_log(self, tmp_path):
        log_file = tmp_path / "logs" / "tool.log"
        log_file.parent.mkdir()
        log_file.write_text("earlier\n")
        inv = python_invocation("print('later')", tmp_path, append_log=True)
        self.invoker.invoke(inv, "repeat_modeler")
        text = log_file.read_text()
        assert text.startswith("earlier\n")
        assert "later" in text

    def test_cwd_is_created(self, tmp_path):
        out = tmp_path / "stage_out"
        inv = python_invocation("open('marker.txt', 'w').write('x')", tmp_path, cwd=out)
        self.invoker.invoke(inv, "busco")
        assert (out / "marker.txt").is_file()

    def test_non_zero_exit(self, tmp_path):
        inv = python_invocation("import sys; print('boom'); sys.exit(3)", tmp_path)
        with pytest.raises(ToolExecutionError) as excinfo:
            self.invoker.invoke(inv, "star_align")
        err = excinfo.value
        assert err.stage == "star_align"
        assert err.exit_code == 3
        assert err.log_file == tmp_path / "logs" / "tool.log"
        assert "boom" in err.log_file.read_text()

    def test_missing_executable(self, tmp_path):
        inv = Invocation(tool="busco", argv=("definitely-not-a-real-tool-xyz",), log_file=tmp_path / "x.log")
        with pytest.raises(MissingEnvironmentError) as excinfo:
            self.invoker.invoke(inv, "busco")
        assert excinfo.value.stage == "busco"
        assert excinfo.value.executable == "definitely-not-a-real-tool-xyz"
        assert "PATH" in excinfo.value.hint
        assert not (tmp_path / "x.log").exists()

    def test_missing_runner(self):
        invoker = ToolInvoker(EnvironmentConfig(runner="micromamba"))
        inv = Invocation(tool="busco", argv=("busco",), environment="annotation")
        with patch("genomeannot.external.base.shutil.which", return_value=None):
            with pytest.raises(MissingEnvironmentError, match="micromamba") as excinfo:
                invoker.invoke(inv, "busco")
        assert "micromamba create -n genome_annot" in excinfo.value.hint

    def test_tool_missing_inside_runner_environment(self, tmp_path, monkeypatch):
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        shim = bin_dir / "conda"
        # Drops "run --no-capture-output -n ENV" and execs the rest
        shim.write_text('#!/bin/sh\nshift 4\nexec "$@"\n')
        shim.chmod(0o755)
        monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ['PATH']}")

        invoker = ToolInvoker(EnvironmentConfig(runner="conda"))
        inv = Invocation(
            tool="busco",
            argv=("busco-not-installed-xyz",),
            environment="annotation",
            log_file=tmp_path / "busco.log",
        )
        with pytest.raises(MissingEnvironmentError) as excinfo:
            invoker.invoke(inv, "busco")
        assert excinfo.value.stage == "busco"
        assert excinfo.value.executable == "busco-not-installed-xyz"
        assert "conda create -n genome_annot" in excinfo.value.hint

    def test_exit_127_without_runner_is_tool_failure(self, tmp_path):
        inv = python_invocation("raise SystemExit(127)", tmp_path)
        with pytest.raises(ToolExecutionError) as excinfo:
            self.invoker.invoke(inv, "busco")
        assert excinfo.value.exit_code == 127

    def test_requires_file_absent_skips(self, tmp_path, caplog):
        inv = python_invocation(
            "raise SystemExit(1)", tmp_path, requires_file=tmp_path / "braker.gtf"
        )
        with caplog.at_level("WARNING", logger="genomeannot"):
            assert self.invoker.invoke(inv, "braker") == 0
        assert "braker.gtf not found" in caplog.text

    def test_requires_file_present_runs(self, tmp_path):
        gtf = tmp_path / "braker.gtf"
        gtf.write_text("")
        inv = python_invocation("raise SystemExit(2)", tmp_path, requires_file=gtf)
        with pytest.raises(ToolExecutionError):
            self.invoker.invoke(inv, "braker")


class TestExternalTool:
    """Builder base class."""

    def test_split_args(self):
        tool = ExternalTool(threads=8, extra_args="--a 1 --b 'two words'")
        assert tool.threads == 8
        assert tool.extra_args == ["--a", "1", "--b", "two words"]

    def test_empty_args(self):
        assert ExternalTool.split_args("") == []
        assert ExternalTool.split_args(None) == []
