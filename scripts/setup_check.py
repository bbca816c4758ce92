#!/usr/bin/env python3
"""
setup_check.py - Verify valuation-risk environment and dependencies.

Usage:
    python scripts/setup_check.py [--verbose]

Checks:
    1. Python version >= 3.10
    2. Core dependencies installed
    3. Test dependencies status
    4. Directory structure
    5. Package smoke run (reference model baseline and Greeks)

Exit codes:
    0 = All checks passed
    1 = Critical issue (blocks development)
"""

import importlib
import sys
from pathlib import Path
from typing import NamedTuple


class CheckResult(NamedTuple):
    """Result of a single check."""
    name: str
    passed: bool
    message: str
    critical: bool = True


def check_python_version() -> CheckResult:
    """Verify Python version >= 3.10."""
    version = sys.version_info
    return CheckResult(
        name="Python Version",
        passed=version >= (3, 10),
        message=f"Python {version.major}.{version.minor}.{version.micro}",
        critical=True
    )


def _check_imports(deps: list[tuple[str, str]], label: str, critical: bool) -> list[CheckResult]:
    results = []
    for pkg_name, min_version in deps:
        try:
            module = importlib.import_module(pkg_name)
            version = getattr(module, "__version__", "unknown")
            results.append(CheckResult(f"{label}: {pkg_name}", True, f"v{version}", critical))
        except ImportError:
            qualifier = "required" if critical else "optional"
            results.append(CheckResult(
                f"{label}: {pkg_name}",
                False,
                f"NOT INSTALLED ({qualifier} >= {min_version})",
                critical,
            ))
    return results


def check_core_dependencies() -> list[CheckResult]:
    """Check that runtime dependencies are installed."""
    return _check_imports([("numpy", "1.24"), ("pandas", "2.0")], "Core", critical=True)


def check_test_dependencies() -> list[CheckResult]:
    """Check test dependencies (non-critical)."""
    return _check_imports(
        [("pytest", "7.0"), ("hypothesis", "6.0"), ("scipy", "1.11")], "Optional[test]", critical=False
    )


def check_directory_structure() -> list[CheckResult]:
    """Verify expected directory structure exists."""
    project_root = Path(__file__).parent.parent
    expected = ["src/valuation_risk", "tests", "examples", "scripts", "pyproject.toml"]

    results = []
    for path in expected:
        exists = (project_root / path).exists()
        results.append(CheckResult(
            name=f"Path: {path}",
            passed=exists,
            message="exists" if exists else "MISSING",
            critical=path in ("src/valuation_risk", "pyproject.toml"),
        ))
    return results


def check_smoke_run() -> CheckResult:
    """Value the reference model and compute its Greeks."""
    sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
    try:
        from valuation_risk import ReferenceValuationModel, calculate_all_greeks, default_base_inputs

        greeks = calculate_all_greeks(ReferenceValuationModel(), default_base_inputs())
    except Exception as e:
        return CheckResult("Smoke run", False, f"{type(e).__name__}: {e}", critical=True)
    return CheckResult(
        "Smoke run",
        greeks.is_complete,
        f"baseline ${greeks.baseline.total:,.1f}B, {len(greeks.delta)} deltas",
        critical=True,
    )


def print_results(results: list[CheckResult], verbose: bool = False) -> None:
    """Print results (failures always, passes when verbose)."""
    for result in results:
        if result.passed:
            symbol, color = "✓", "\033[92m"
        elif result.critical:
            symbol, color = "✗", "\033[91m"
        else:
            symbol, color = "⚠", "\033[93m"
        if verbose or not result.passed:
            print(f"{color}{symbol}\033[0m {result.name}: {result.message}")


def main():
    """Run all checks and report results."""
    verbose = "--verbose" in sys.argv or "-v" in sys.argv

    print("=" * 60)
    print("  valuation-risk Environment Check")
    print("=" * 60)
    print()

    sections = [
        ("Python Version:", lambda: [check_python_version()], True),
        ("Core Dependencies:", check_core_dependencies, verbose),
        ("Test Dependencies:", check_test_dependencies, verbose),
        ("Directory Structure:", check_directory_structure, verbose),
        ("Smoke Run:", lambda: [check_smoke_run()], True),
    ]

    all_results: list[CheckResult] = []
    for title, check, show_all in sections:
        print(title)
        results = check()
        all_results.extend(results)
        print_results(results, verbose=show_all)
        print()

    critical_failures = sum(1 for r in all_results if not r.passed and r.critical)
    warnings = sum(1 for r in all_results if not r.passed and not r.critical)

    print("=" * 60)
    if critical_failures > 0:
        print(f"\033[91m✗ {critical_failures} critical issue(s) found\033[0m")
        print("  Run: pip install -e '.[test]'")
        sys.exit(1)
    elif warnings > 0:
        print(f"\033[93m⚠ {warnings} warning(s) (non-blocking)\033[0m")
        print("  Test packages can be installed with: pip install -e '.[test]'")
        sys.exit(0)
    else:
        print("\033[92m✓ All checks passed!\033[0m")
        sys.exit(0)


if __name__ == "__main__":
    main()
