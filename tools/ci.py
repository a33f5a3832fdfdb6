#!/usr/bin/env python3
# Copyright 2026 typesync Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the typesync CI checks locally.

Usage::

    tools/ci.py                 # every step
    tools/ci.py lint tests      # selected steps only
    tools/ci.py --fail-fast
"""

import argparse
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Step:
    key: str
    title: str
    command: tuple[str, ...]


STEPS: tuple[Step, ...] = (
    Step("format", "Format check", ("ruff", "format", "--check", "src/", "tests/", "tools/")),
    Step("lint", "Lint", ("ruff", "check", "src/", "tests/", "tools/")),
    Step("tests", "Tests", ("pytest", "--cov=typesync", "--cov-report=term-missing")),
    Step("build", "Build", (sys.executable, "-m", "build")),
)


def main(argv: list[str] | None = None) -> int:
    """Run the selected CI steps and print a summary. Returns the exit code."""
    parser = argparse.ArgumentParser(description="Run typesync CI checks")
    parser.add_argument("steps", nargs="*", choices=[s.key for s in STEPS], help="Steps to run (default: all)")
    parser.add_argument("--fail-fast", action="store_true", help="Stop at the first failing step")
    args = parser.parse_args(argv)

    selected = [s for s in STEPS if not args.steps or s.key in args.steps]
    results: list[tuple[Step, bool, float]] = []
    for step in selected:
        passed, elapsed = _run(step)
        results.append((step, passed, elapsed))
        if not passed and args.fail_fast:
            break

    _banner("Summary")
    for step, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        print(colour(f"  {'PASS' if passed else 'FAIL'}  {step.title} ({elapsed:.1f}s)"))
    skipped = len(selected) - len(results)
    if skipped:
        print(chalk.yellow(f"  SKIP  {skipped} step(s) after first failure"))
    print()
    return 0 if all(passed for _, passed, _ in results) and not skipped else 1


# ################
# Implementation
# ################


def _run(step: Step) -> tuple[bool, float]:
    _banner(step.title)
    start = time.monotonic()
    try:
        proc = subprocess.run(step.command, cwd=Path(__file__).resolve().parent.parent)
    except FileNotFoundError:
        print(chalk.red(f"Command not found: {step.command[0]}"))
        return False, time.monotonic() - start
    return proc.returncode == 0, time.monotonic() - start


def _banner(title: str) -> None:
    rule = chalk.blue("=" * 60)
    print(f"\n{rule}\n{chalk.blue(title)}\n{rule}")


if __name__ == "__main__":
    sys.exit(main())
