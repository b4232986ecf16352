from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

SRC_ROOT = Path(__file__).resolve().parents[1] / "src" / "orderdesk"

# Inner layers may not reach outwards. The application layer may use pydantic
# and prometheus_client (DTOs and metrics) but no storage, transport or web code.
_OUTER_LAYERS = {"orderdesk.api", "orderdesk.infrastructure"}
_ADAPTER_LIBRARIES = {
    "fastapi",
    "starlette",
    "sqlalchemy",
    "alembic",
    "psycopg",
    "redis",
    "httpx",
    "requests",
    "opentelemetry",
}

LAYER_RULES: dict[str, frozenset[str]] = {
    "domain": frozenset(
        _OUTER_LAYERS
        | _ADAPTER_LIBRARIES
        | {"orderdesk.application", "pydantic", "prometheus_client"}
    ),
    "application": frozenset(_OUTER_LAYERS | _ADAPTER_LIBRARIES),
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str
    layer: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _matches(module: str, forbidden: frozenset[str]) -> bool:
    return any(module == name or module.startswith(f"{name}.") for name in forbidden)


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module


def scan_layer(path: Path, layer: str) -> list[Violation]:
    forbidden = LAYER_RULES[layer]
    violations: list[Violation] = []
    for file_path in _python_files(path):
        tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
        for line, module in _imported_modules(tree):
            if _matches(module, forbidden):
                violations.append(
                    Violation(file_path=file_path, line=line, module=module, layer=layer)
                )
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import policy check for the orderdesk domain and application layers."
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Path to scan with the domain rules (repeatable). Defaults to the whole tree.",
    )
    parser.add_argument(
        "--layer",
        choices=sorted(LAYER_RULES),
        default="domain",
        help="Rule set applied to --path arguments.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.path:
        targets = [(Path(item), args.layer) for item in args.path]
    else:
        targets = [(SRC_ROOT / layer, layer) for layer in LAYER_RULES]

    violations: list[Violation] = []
    for path, layer in targets:
        violations.extend(scan_layer(path, layer))

    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"[{violation.layer}] {violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
