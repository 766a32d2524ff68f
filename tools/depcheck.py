from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "src" / "qrmenu"

FRAMEWORK_MODULES = frozenset(
    {
        "fastapi",
        "starlette",
        "sqlalchemy",
        "alembic",
        "psycopg",
        "redis",
        "httpx",
        "requests",
        "opentelemetry",
        "prometheus_client",
    }
)

# Each layer may import only inward; the domain also stays free of pydantic.
LAYER_RULES: dict[str, frozenset[str]] = {
    "domain": FRAMEWORK_MODULES
    | {"pydantic", "qrmenu.application", "qrmenu.api", "qrmenu.infrastructure"},
    "application": (FRAMEWORK_MODULES - {"prometheus_client"})
    | {"qrmenu.api", "qrmenu.infrastructure"},
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _is_forbidden(module: str, forbidden: frozenset[str]) -> bool:
    return any(module == name or module.startswith(f"{name}.") for name in forbidden)


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module


def scan_file(file_path: Path, forbidden: frozenset[str]) -> list[Violation]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    return [
        Violation(file_path=file_path, line=line, module=module)
        for line, module in _imported_modules(tree)
        if _is_forbidden(module, forbidden)
    ]


def find_violations(
    layers: Sequence[str] = tuple(LAYER_RULES),
    package_root: Path = PACKAGE_ROOT,
) -> list[Violation]:
    violations: list[Violation] = []
    for layer in layers:
        for file_path in _python_files(package_root / layer):
            violations.extend(scan_file(file_path, LAYER_RULES[layer]))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import layering check for src/qrmenu.")
    parser.add_argument(
        "--layer",
        action="append",
        choices=sorted(LAYER_RULES),
        default=[],
        help="Layer to scan (repeatable). Defaults to every layer with rules.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    violations = find_violations(args.layer or tuple(LAYER_RULES))
    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"{violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
