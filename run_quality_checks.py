#!/usr/bin/env python
"""Run the formatting, lint, type and test checks for the xr2280x driver.

Usage:
    python run_quality_checks.py                    # Run every check
    python run_quality_checks.py --fix              # Let black/isort rewrite files
    python run_quality_checks.py --skip lint type   # Skip some checks
    python run_quality_checks.py --no-speculative   # Leave out the interrupt decode tests
"""

import argparse
import subprocess
import sys
from typing import Callable, Optional

PACKAGE_DIR = "xr2280x"
TESTS_DIR = "tests"
SOURCE_DIRS = [PACKAGE_DIR, TESTS_DIR, "run_quality_checks.py"]

CHECK_NAMES = ("formatting", "imports", "lint", "type", "deadcode", "complexity", "tests")


class CheckRunner:
    """Runs each check as a subprocess and records the outcome."""

    def __init__(
        self,
        fix: bool = False,
        verbose: bool = False,
        skip_checks: Optional[list[str]] = None,
        speculative: bool = True,
    ):
        self.fix = fix
        self.verbose = verbose
        self.skip_checks = set(skip_checks or [])
        self.speculative = speculative
        self.results: dict[str, bool] = {}

    def run_command(self, cmd: list[str], label: str) -> bool:
        """Run cmd; output is shown when verbose or on failure."""
        print(f"\n=== {label} ===")
        try:
            result = subprocess.run(
                cmd, check=False, capture_output=not self.verbose, text=True
            )
        except FileNotFoundError as exc:
            print(f"[FAIL] {label}: {exc}")
            print("       Install the dev tools with: pip install -e .[test,dev]")
            return False

        ok = result.returncode == 0
        if not ok and not self.verbose:
            print(result.stdout)
            print(result.stderr)
        print(f"[{'PASS' if ok else 'FAIL'}] {label}")
        return ok

    # ==========================================================
    # Checks
    # ==========================================================

    def check_formatting(self) -> bool:
        cmd = ["black", *SOURCE_DIRS] if self.fix else ["black", "--check", *SOURCE_DIRS]
        return self.run_command(cmd, "black")

    def check_imports(self) -> bool:
        cmd = ["isort", *SOURCE_DIRS] if self.fix else ["isort", "--check-only", *SOURCE_DIRS]
        return self.run_command(cmd, "isort")

    def check_lint(self) -> bool:
        return self.run_command(["pylint", PACKAGE_DIR], "pylint")

    def check_types(self) -> bool:
        return self.run_command(["mypy", PACKAGE_DIR], "mypy")

    def check_dead_code(self) -> bool:
        return self.run_command(["vulture", PACKAGE_DIR, "--min-confidence", "80"], "vulture")

    def check_complexity(self) -> bool:
        return self.run_command(["radon", "cc", PACKAGE_DIR, "-a"], "radon")

    def run_tests(self) -> bool:
        cmd = [
            "pytest",
            f"--cov={PACKAGE_DIR}",
            "--cov-report=term-missing",
            TESTS_DIR,
        ]
        if not self.speculative:
            cmd += ["-m", "not speculative"]
        return self.run_command(cmd, "pytest + coverage")

    # ==========================================================
    # Driver
    # ==========================================================

    def run_all(self) -> int:
        """Run every check that is not skipped.

        Returns:
            0 if all checks passed, 1 otherwise
        """
        checks: dict[str, Callable[[], bool]] = {
            "formatting": self.check_formatting,
            "imports": self.check_imports,
            "lint": self.check_lint,
            "type": self.check_types,
            "deadcode": self.check_dead_code,
            "complexity": self.check_complexity,
            "tests": self.run_tests,
        }
        for name, check in checks.items():
            if name in self.skip_checks:
                print(f"\n[SKIP] {name}")
                continue
            self.results[name] = check()

        self.print_summary()
        return 0 if all(self.results.values()) else 1

    def print_summary(self) -> None:
        print("\n=== Summary ===")
        for name, ok in self.results.items():
            print(f"  {'PASS' if ok else 'FAIL'}  {name}")
        if self.skip_checks:
            print(f"  skipped: {', '.join(sorted(self.skip_checks))}")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Apply black and isort fixes instead of only checking",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Stream tool output")
    parser.add_argument(
        "--skip",
        nargs="+",
        default=[],
        choices=CHECK_NAMES,
        help="Checks to skip",
    )
    parser.add_argument(
        "--no-speculative",
        dest="speculative",
        action="store_false",
        help="Deselect tests marked 'speculative'",
    )
    args = parser.parse_args()

    runner = CheckRunner(
        fix=args.fix,
        verbose=args.verbose,
        skip_checks=args.skip,
        speculative=args.speculative,
    )
    return runner.run_all()


if __name__ == "__main__":
    sys.exit(main())
