#!/usr/bin/env python3
"""
Проверка проекта dintero-client-core перед коммитом.

Шаги:
- black (форматирование)
- ruff (линтинг)
- mypy по пакету dintero_client (пропускается с --fast)
- pytest с coverage по dintero_client

Usage:
    python scripts/check.py
    python scripts/check.py --fast        # без mypy
    python scripts/check.py --fix         # black/ruff исправляют сами
    python scripts/check.py --unit-only   # без tests/integration
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List, Tuple

ROOT = Path(__file__).resolve().parent.parent
PACKAGE = ROOT / "src" / "dintero_client"
TESTS = ROOT / "tests"


class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    BOLD = '\033[1m'
    END = '\033[0m'


def print_step(message: str) -> None:
    print(f"\n{Colors.BOLD}{Colors.BLUE}▶ {message}{Colors.END}")


def print_result(name: str, success: bool) -> None:
    status, color = ("✓ PASSED", Colors.GREEN) if success else ("✗ FAILED", Colors.RED)
    print(f"{color}{status:12}{Colors.END} {name}")


def run_command(command: List[str], description: str) -> Tuple[bool, str]:
    """
    Запустить инструмент.

    Отсутствующий инструмент не валит проверку, он пропускается с
    предупреждением.

    Returns:
        (success, stdout + stderr)
    """
    print_step(description)

    try:
        result = subprocess.run(
            command,
            cwd=ROOT,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace',
        )
    except FileNotFoundError:
        print(f"{Colors.YELLOW}⚠ {command[0]} not installed - SKIPPED{Colors.END}")
        return True, ""

    output = result.stdout + result.stderr
    if result.returncode != 0:
        print(output[-2000:])
    return result.returncode == 0, output


def build_steps(args: argparse.Namespace) -> List[Tuple[str, str, List[str]]]:
    targets = [str(PACKAGE), str(TESTS)]
    steps = []

    black = ["black"] + ([] if args.fix else ["--check"]) + targets
    steps.append(("Black", "Форматирование (black)", black))

    ruff = ["ruff", "check"] + targets + (["--fix"] if args.fix else [])
    steps.append(("Ruff", "Линтинг (ruff)", ruff))

    if not args.fast:
        steps.append(("Mypy", "Типы (mypy)", ["mypy", str(PACKAGE)]))

    if not args.skip_tests:
        pytest_cmd = [
            sys.executable, "-m", "pytest",
            "--cov=dintero_client", "--cov-report=term-missing:skip-covered",
        ]
        pytest_cmd.append(str(TESTS / "unit") if args.unit_only else str(TESTS))
        steps.append(("Pytest", "Тесты (pytest)", pytest_cmd))

    return steps


def main() -> int:
    parser = argparse.ArgumentParser(description="Проверка качества кода")
    parser.add_argument("--fast", action="store_true", help="Без mypy")
    parser.add_argument("--fix", action="store_true", help="Автоматические исправления")
    parser.add_argument("--skip-tests", action="store_true", help="Только линтеры")
    parser.add_argument("--unit-only", action="store_true", help="Без интеграционных тестов")
    args = parser.parse_args()

    print(f"\n{Colors.BOLD}{'=' * 60}")
    print("  dintero-client-core - проверка качества")
    print(f"{'=' * 60}{Colors.END}\n")
    print(f"Package: {PACKAGE}")
    print(f"Tests:   {TESTS}")

    results = []
    for name, description, command in build_steps(args):
        success, output = run_command(command, description)
        results.append((name, success))
        if name == "Pytest":
            summary = [line for line in output.splitlines()
                       if line.startswith("=") and ("passed" in line or "failed" in line)]
            if summary:
                print(summary[-1])

    print(f"\n{Colors.BOLD}{'=' * 60}")
    print("  ИТОГОВЫЙ ОТЧЁТ")
    print(f"{'=' * 60}{Colors.END}\n")
    for name, success in results:
        print_result(name, success)

    if all(success for _, success in results):
        print(f"\n{Colors.GREEN}{Colors.BOLD}✓ ВСЕ ПРОВЕРКИ ПРОШЛИ{Colors.END}\n")
        return 0

    print(f"\n{Colors.RED}{Colors.BOLD}✗ ЕСТЬ ОШИБКИ{Colors.END}\n")
    return 1


if __name__ == "__main__":
    sys.exit(main())
