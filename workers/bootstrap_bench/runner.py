"""
Bench runner — the bootstrap benchmark matrix.

For each fixed scenario: build the compiler form (compile the compiler's
source, optionally debug-toggle the result, natively build it), then
time that build compiling the same source again.  Scenarios run strictly
in order and the first failure stops the whole matrix.
"""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from bootstrap_bench.config import BenchSettings
from bootstrap_bench.core.debug_toggle import DebugToggle
from bootstrap_bench.core.errors import BenchmarkError, FilesystemError
from bootstrap_bench.core.executable_meta import describe_executable
from bootstrap_bench.core.invoker import CompilerForm, build_compiler_args, invoke_compiler
from bootstrap_bench.core.native_builder import build_native, render_command
from bootstrap_bench.core.timed_run import TimedRun
from bootstrap_bench.core.toolchain import capture_toolchain
from bootstrap_bench.io.schema import BenchReport, ScenarioResult, now_iso
from bootstrap_bench.policy.profile import BenchProfile
from bootstrap_bench.policy.scenarios import (
    DEFAULT_SCENARIOS,
    CleanupPolicy,
    Invocation,
    Scenario,
    check_unique_labels,
)

logger = logging.getLogger(__name__)


# ── Scenario wiring ──────────────────────────────────────────────────────────

def baseline_form(profile: BenchProfile, scenario: Scenario) -> CompilerForm:
    """The compiler form that produces the scenario's intermediate artifact."""
    if scenario.invocation == Invocation.INTERPRETED:
        return CompilerForm.interpreted(profile.interpreter, profile.compiler_source)
    return CompilerForm.precompiled(profile.compiler_binary)


def measured_form(profile: BenchProfile, executable: Path) -> Tuple[CompilerForm, Optional[str]]:
    """The (form, host) pair timed compiling the source again."""
    if profile.measure_via_driver:
        return CompilerForm.precompiled(profile.compiler_binary), str(executable)
    return CompilerForm.precompiled(executable), None


def scenario_paths(profile: BenchProfile, scenario: Scenario) -> Tuple[Path, Path, Path, Path]:
    """(artifact, executable, result, trace) paths for *scenario*."""
    suffix = profile.artifact_suffix
    return (
        profile.workdir / scenario.artifact_name(suffix),
        profile.workdir / scenario.executable_name(),
        profile.workdir / scenario.result_name(suffix),
        profile.trace_root / scenario.trace_name(),
    )


def load_toggle(profile: BenchProfile) -> DebugToggle:
    if profile.debug_sed_script is not None:
        return DebugToggle.from_sed_script(profile.debug_sed_script)
    return DebugToggle.default()


# ── Build + measure ──────────────────────────────────────────────────────────

def build_scenario(
    profile: BenchProfile,
    scenario: Scenario,
    toggle: DebugToggle,
) -> Path:
    """Produce the scenario's native compiler and return its path."""
    artifact, executable, _, _ = scenario_paths(profile, scenario)

    invoke_compiler(
        baseline_form(profile, scenario),
        profile.compiler_source,
        profile.target,
        profile.optimization,
        artifact,
        profile.workdir,
        extra_args=profile.extra_args,
    )
    if scenario.is_debug:
        toggle.apply(artifact)
    return build_native(profile.native_builder, artifact, executable, profile.workdir)


def measure_scenario(profile: BenchProfile, scenario: Scenario, executable: Path) -> TimedRun:
    """Create (not start) the timed run for *scenario*."""
    _, _, result, trace = scenario_paths(profile, scenario)
    form, host = measured_form(profile, executable)
    return TimedRun(
        label=scenario.label,
        form=form,
        source=profile.compiler_source,
        target=profile.target,
        optimization=profile.optimization,
        output=result,
        trace_path=trace,
        cwd=profile.workdir,
        host=host,
        extra_args=profile.extra_args,
    )


def cleanup_executables(executables: Sequence[Path], policy: CleanupPolicy) -> List[Path]:
    """Apply *policy* to the built executables; returns what was removed."""
    if policy == CleanupPolicy.KEEP_ALL:
        return []
    removed: List[Path] = []
    for exe in executables:
        try:
            exe.unlink(missing_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot remove {exe}: {e}") from e
        removed.append(exe)
        logger.debug("Removed %s", exe)
    return removed


# ── Public API ───────────────────────────────────────────────────────────────

def run_matrix(
    profile: BenchProfile,
    scenarios: Sequence[Scenario] = DEFAULT_SCENARIOS,
    probe_toolchain: bool = True,
) -> BenchReport:
    """
    Run every scenario in order and return the report.

    Prints the date, a progress line and an ``Elapsed time`` line per
    scenario, then ``Done``.  Any BenchmarkError aborts the remaining
    scenarios, skips cleanup and propagates to the caller.
    """
    scenarios = tuple(scenarios)
    check_unique_labels(scenarios)
    toggle = load_toggle(profile)

    report = BenchReport(profile_id=profile.profile_id, started_at=now_iso())
    if probe_toolchain:
        report.toolchain = capture_toolchain(profile.interpreter, profile.native_builder[0])

    print(datetime.now().strftime("%a %b %d %H:%M:%S %Y"))

    executables: List[Path] = []
    for sc in scenarios:
        artifact, executable, result, _ = scenario_paths(profile, sc)
        entry = ScenarioResult(
            label=sc.label,
            build_mode=sc.build_mode.value,
            invocation=sc.invocation.value,
            artifact_path=str(artifact),
            executable_path=str(executable),
            result_path=str(result),
        )
        report.scenarios.append(entry)

        print(f"Compiling {sc.label} with {baseline_form(profile, sc).describe()}...")
        try:
            built = build_scenario(profile, sc, toggle)
            executables.append(built)
            entry.executable = describe_executable(built)
            record = measure_scenario(profile, sc, built).run()
        except BenchmarkError:
            entry.status = "FAILED"
            report.finished_at = now_iso()
            report.status = report.compute_status()
            logger.error("Scenario '%s' failed; remaining scenarios skipped", sc.label)
            raise

        entry.trace = record
        entry.status = "SUCCESS"
        print(f"Elapsed time: {record.elapsed_seconds} seconds")

    cleanup_executables(executables, profile.cleanup_policy)

    report.finished_at = now_iso()
    report.status = report.compute_status()
    print("Done")
    return report


def plan_matrix(
    profile: BenchProfile,
    scenarios: Sequence[Scenario] = DEFAULT_SCENARIOS,
) -> List[Tuple[str, List[List[str]]]]:
    """Commands each scenario would run, without running anything."""
    plan = []
    for sc in scenarios:
        artifact, executable, result, _ = scenario_paths(profile, sc)
        form = baseline_form(profile, sc)
        mform, host = measured_form(profile, executable)
        cmds = [
            form.argv() + build_compiler_args(
                profile.compiler_source, profile.target, profile.optimization,
                artifact, extra_args=profile.extra_args,
            ),
            render_command(profile.native_builder, artifact, executable),
            mform.argv() + build_compiler_args(
                profile.compiler_source, profile.target, profile.optimization,
                result, host=host, extra_args=profile.extra_args,
            ),
        ]
        plan.append((sc.label, cmds))
    return plan


# ── CLI ──────────────────────────────────────────────────────────────────────

def _settings_from_args(args: argparse.Namespace) -> BenchSettings:
    overrides = {
        "WORKDIR": args.workdir,
        "COMPILER_SOURCE": args.source,
        "COMPILER_BINARY": args.compiler,
        "INTERPRETER": args.interpreter,
        "NATIVE_BUILDER": args.native_builder,
        "TRACE_DIR": args.trace_dir,
        "CLEANUP_POLICY": args.cleanup,
        "DEBUG_SED_SCRIPT": args.debug_sed_script,
        "EXTRA_ARGS": args.extra_args,
    }
    if args.measure_via_driver:
        overrides["MEASURE_VIA_DRIVER"] = True
    return BenchSettings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for bootstrap_bench."""
    parser = argparse.ArgumentParser(
        description="bootstrap_bench — time a self-hosting compiler compiling itself",
    )
    parser.add_argument("--workdir", type=Path, help="Directory holding the compiler and outputs")
    parser.add_argument("--source", help="Compiler source compiled in every scenario")
    parser.add_argument("--compiler", help="Baseline precompiled compiler binary")
    parser.add_argument("--interpreter", help="Interpreter for the interpreted scenarios")
    parser.add_argument("--native-builder",
                        help="Native build command; {artifact} and {output} are substituted")
    parser.add_argument("--trace-dir", type=Path, help="Where trace files are written")
    parser.add_argument("--cleanup", choices=[p.value for p in CleanupPolicy],
                        help="Remove or keep built executables after the matrix")
    parser.add_argument("--debug-sed-script", type=Path,
                        help="sed script of s/// rules that enable debug mode")
    parser.add_argument("--extra-args",
                        help="Extra compiler flags appended to every invocation (shell-quoted)")
    parser.add_argument("--measure-via-driver", action="store_true",
                        help="Time the baseline compiler driving the build with -c <exe>")
    parser.add_argument("--dry-run", action="store_true", help="Print planned commands only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        profile = _settings_from_args(args).to_profile()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    if args.dry_run:
        print("Planned runs:")
        for label, cmds in plan_matrix(profile):
            print(f"[{label}]")
            for cmd in cmds:
                print("  " + shlex.join(cmd))
        return 0

    try:
        run_matrix(profile)
    except BenchmarkError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
