"""Main pipeline orchestrator for genomeannot."""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import Any, Iterable, Optional

from genomeannot.core.markers import FileMarkerStore, MarkerStore
from genomeannot.core.pipeline_types import ExecutionResult, LocalTask, Stage, StageRecord
from genomeannot.core.resolver import ResolvedSettings
from genomeannot.core.steps.definitions import PIPELINE_STAGES, TERMINAL_STAGE
from genomeannot.exceptions import (
    ConfigurationError,
    DependencyError,
    GenomeAnnotError,
    StageError,
)
from genomeannot.external.base import ToolInvoker
from genomeannot.utils.logging import LogTemplates, get_logger
from genomeannot.utils.progress import iter_progress

ALL_TARGET = "all"


class Pipeline:
    """Dependency-aware, resumable stage executor.

    Stages run one at a time in topological order. A stage whose marker is
    present is skipped; a marker is written only after all of the stage's
    actions succeeded. Any failure aborts the run.
    """

    STAGES = PIPELINE_STAGES

    def __init__(
        self,
        settings: ResolvedSettings,
        markers: Optional[MarkerStore] = None,
        invoker: Optional[ToolInvoker] = None,
        stages: Optional[Iterable[Stage]] = None,
        enable_progress: Optional[bool] = None,
    ):
        self.settings = settings
        self.logger = get_logger(self.__class__.__name__)
        self.stages: list[Stage] = list(stages) if stages is not None else list(self.STAGES)
        self._by_name = {s.name: s for s in self.stages}
        self.markers = markers or FileMarkerStore(settings.paths.marker_dir)
        self.invoker = invoker or ToolInvoker(settings.config.environments)
        if enable_progress is None:
            enable_progress = settings.config.runtime.enable_progress
        self.enable_progress = enable_progress
        self._validate_graph()

    # ===================== GRAPH =====================

    def _validate_graph(self) -> None:
        """Reject duplicate names, unknown predecessors and cycles."""
        if len(self._by_name) != len(self.stages):
            seen: set[str] = set()
            for stage in self.stages:
                if stage.name in seen:
                    raise DependencyError(f"Duplicate stage name: {stage.name}", stage=stage.name)
                seen.add(stage.name)
        for stage in self.stages:
            for dep in stage.depends_on:
                if dep not in self._by_name:
                    raise DependencyError(
                        f"Stage '{stage.name}' depends on unknown stage '{dep}'", stage=stage.name
                    )
        # Full-graph order check catches cycles regardless of evidence
        self._topological_order(self.stages, lambda _s: True)

    def _topological_order(self, members: list[Stage], include) -> list[Stage]:
        """Stable Kahn sort of ``members``; ties follow declaration order."""
        names = {s.name for s in members}
        ordered: list[Stage] = []
        placed: set[str] = set()
        remaining = [s for s in self.stages if s.name in names]
        while remaining:
            for stage in remaining:
                preds = [d for d in stage.depends_on if d in names and include(self._by_name[d])]
                if all(p in placed for p in preds):
                    ordered.append(stage)
                    placed.add(stage.name)
                    remaining.remove(stage)
                    break
            else:
                cycle = ", ".join(s.name for s in remaining)
                raise DependencyError(
                    f"Stage graph contains a cycle among: {cycle}", stage=remaining[0].name
                )
        return ordered

    def is_applicable(self, stage: Stage) -> bool:
        return stage.applicable(self.settings.evidence)

    def applicable_stages(self) -> list[Stage]:
        """Stages that belong to the graph under the current evidence, in declaration order."""
        return [s for s in self.stages if self.is_applicable(s)]

    def predecessors(self, stage: Stage) -> list[Stage]:
        """Declared predecessors that are applicable under the current evidence."""
        return [
            self._by_name[d] for d in stage.depends_on if self.is_applicable(self._by_name[d])
        ]

    def resolve_target(self, target: Optional[str]) -> Stage:
        name = TERMINAL_STAGE if target in (None, ALL_TARGET) else target
        stage = self._by_name.get(name)
        if stage is None:
            known = ", ".join([ALL_TARGET] + [s.name for s in self.stages])
            raise ConfigurationError(f"Unknown stage '{name}'. Known targets: {known}")
        if not self.is_applicable(stage):
            raise ConfigurationError(
                f"Stage '{name}' does not apply to the configured evidence "
                f"(mode {self.settings.mode.value}; alignment requires raw RNA-seq reads)"
            )
        return stage

    def plan(self, target: Optional[str] = ALL_TARGET) -> list[Stage]:
        """Target plus its transitive applicable predecessors, topologically ordered."""
        root = self.resolve_target(target)
        closure: dict[str, Stage] = {}
        stack = [root]
        while stack:
            stage = stack.pop()
            if stage.name in closure:
                continue
            closure[stage.name] = stage
            stack.extend(self.predecessors(stage))
        return self._topological_order(list(closure.values()), self.is_applicable)

    # ===================== EXECUTION =====================

    def render_actions(self, stage: Stage) -> list[str]:
        """Human-readable command lines for a stage (used by dry runs)."""
        rendered = []
        for action in stage.actions(self.settings):
            if isinstance(action, LocalTask):
                rendered.append(action.render())
            else:
                rendered.append(self.invoker.render(action))
        return rendered

    def user_inputs(self) -> dict[str, Optional[Path]]:
        ev = self.settings.evidence
        return {
            "genome": self.settings.paths.genome,
            "evidence.protein_db": ev.protein_db,
            "evidence.rna_r1": ev.rna_r1,
            "evidence.rna_r2": ev.rna_r2,
            "evidence.rna_bam": ev.rna_bam,
        }

    def missing_inputs(self) -> list[str]:
        return [
            f"{key}: {path}"
            for key, path in self.user_inputs().items()
            if path is not None and not path.exists()
        ]

    def preflight(self) -> None:
        """Verify user-supplied input files exist before any stage runs."""
        missing = self.missing_inputs()
        if missing:
            raise ConfigurationError("Input file(s) not found:\n  " + "\n  ".join(missing))

    def pending(self, target: Optional[str] = ALL_TARGET) -> list[Stage]:
        """Stages of the plan for ``target`` that have no completion marker."""
        return [s for s in self.plan(target) if not self.markers.is_satisfied(s.marker_name)]

    def run(self, target: Optional[str] = ALL_TARGET, dry_run: bool = False) -> ExecutionResult:
        """Run ``target`` (a stage name or "all") and its unsatisfied predecessors."""
        stages = self.plan(target)
        result = ExecutionResult(
            target=target or ALL_TARGET,
            mode=self.settings.mode.value,
            planned=[s.name for s in stages],
            dry_run=dry_run,
        )

        pending = self.pending(target)
        for stage in stages:
            if stage not in pending:
                result.skipped.append(stage.name)
                result.records[stage.name] = StageRecord(stage.name, status="skipped")

        if dry_run:
            for stage in pending:
                result.records[stage.name] = StageRecord(
                    stage.name,
                    status="planned",
                    commands=self.render_actions(stage),
                )
            result.records = {s.name: result.records[s.name] for s in stages}
            return result

        if pending:
            self.preflight()

        total = len(stages)
        iterator = iter_progress(pending, total=len(pending), desc="Stages", enabled=self.enable_progress)
        for stage in iterator:
            index = stages.index(stage) + 1
            self._ensure_predecessors(stage)
            self.logger.info(LogTemplates.STAGE_START.format(index=index, total=total, stage=stage.name))
            record = StageRecord(stage.name, status="running")
            result.records[stage.name] = record
            start = time.time()
            try:
                self._execute_stage(stage, record)
            except GenomeAnnotError as e:
                record.status = "failed"
                record.duration = time.time() - start
                record.error_message = str(e)
                self.logger.error(LogTemplates.STAGE_FAILURE.format(stage=stage.name, error=e))
                raise
            record.duration = time.time() - start
            self.markers.mark_satisfied(stage.marker_name, duration=round(record.duration, 3))
            record.status = "completed"
            result.executed.append(stage.name)
            self.logger.info(
                LogTemplates.STAGE_SUCCESS.format(stage=stage.name, duration=record.duration)
            )

        for name in result.skipped:
            self.logger.info(
                LogTemplates.STAGE_SKIPPED.format(stage=name, reason="already completed")
            )
        result.records = {s.name: result.records[s.name] for s in stages}
        return result

    def _ensure_predecessors(self, stage: Stage) -> None:
        """Re-check that predecessors are satisfied and their products exist."""
        for pred in self.predecessors(stage):
            if not self.markers.is_satisfied(pred.marker_name):
                raise DependencyError(
                    f"Stage '{stage.name}' cannot run: predecessor '{pred.name}' is not satisfied",
                    stage=stage.name,
                )
        missing = [p for p in stage.required_files(self.settings) if not p.exists()]
        if missing:
            raise DependencyError(
                f"Stage '{stage.name}' cannot run: expected upstream output(s) missing: "
                + ", ".join(str(p) for p in missing)
                + " (clean the upstream stage and re-run)",
                stage=stage.name,
            )

    def _execute_stage(self, stage: Stage, record: StageRecord) -> None:
        for action in stage.actions(self.settings):
            if isinstance(action, LocalTask):
                self.logger.info(f"[{stage.name}] {action.description}")
                try:
                    action.func()
                except GenomeAnnotError:
                    raise
                except OSError as e:
                    raise StageError(
                        f"{action.description} failed in stage '{stage.name}': {e}"
                        + (f" (log: {record.log_file})" if record.log_file else ""),
                        stage=stage.name,
                    ) from e
            else:
                if action.log_file is not None:
                    record.log_file = action.log_file
                self.invoker.invoke(action, stage.name)

    # ===================== STATUS & CLEANUP =====================

    def status(self) -> list[dict[str, Any]]:
        """One row per stage: applicability, completion, output directory."""
        rows = []
        for stage in self.stages:
            out_dir = getattr(self.settings.paths, stage.output_dir) if stage.output_dir else None
            rows.append(
                {
                    "name": stage.name,
                    "description": stage.description,
                    "applicable": self.is_applicable(stage),
                    "satisfied": self.markers.is_satisfied(stage.marker_name),
                    "depends_on": list(stage.depends_on),
                    "output_dir": out_dir,
                }
            )
        return rows

    def _remove_tree(self, path: Path) -> None:
        if path.is_dir():
            self.logger.info(f"Removing {path}")
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()

    def clean(self, include_cached: bool = False) -> list[Path]:
        """Remove all markers and stage outputs; optionally the container image too."""
        paths = self.settings.paths
        targets = [paths.marker_dir] + paths.stage_dirs
        if include_cached:
            targets.append(paths.braker_image)
        removed = [t for t in targets if t.exists()]
        self.markers.clear()
        for target in targets:
            self._remove_tree(target)
        return removed

    def clean_stage(self, name: str) -> list[str]:
        """Remove one stage's output directory and marker.

        Markers of stages whose output lives inside that directory are cleared
        too. Returns the names of the cleared markers.
        """
        stage = self._by_name.get(name)
        if stage is None:
            raise ConfigurationError(f"Unknown stage '{name}'")
        cleared = [stage.name]
        if stage.output_dir:
            out_dir = getattr(self.settings.paths, stage.output_dir)
            for other in self.stages:
                if other is stage or not other.output_dir:
                    continue
                other_dir = getattr(self.settings.paths, other.output_dir)
                if other_dir != out_dir and out_dir in other_dir.parents:
                    cleared.append(other.name)
            self._remove_tree(out_dir)
        for stage_name in cleared:
            self.markers.clear(self._by_name[stage_name].marker_name)
        return cleared

    def key_outputs(self) -> dict[str, Optional[Path]]:
        """Main result files of a complete run."""
        paths = self.settings.paths
        return {
            "BUSCO (raw)": paths.busco_raw_dir,
            "Repeat library": paths.denovo_library,
            "Masked genome": paths.softmasked_genome,
            "BUSCO (masked)": paths.busco_masked_dir,
            "RNA-seq BAM": paths.final_bam,
            "Gene models (GTF)": paths.braker_dir / "braker.gtf",
            "Gene models (GFF3)": paths.braker_dir / "braker.gff3",
        }
