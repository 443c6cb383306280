# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rules evaluated against the Python abstract syntax tree."""

from __future__ import annotations

import ast
import asyncio
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from ..constants import RECOMMENDED_TAG, THREAD_COUNT_ENV, THREAD_TIMEOUT_ENV
from ..models import Rule, RuleGroup, RuleTarget, Violation
from .base import RawCatalog, RuleEngine, TargetFile, iter_target_files

PYAST_ENGINE: Final[str] = "pyast"
DEFAULT_THREAD_COUNT: Final[int] = 4
DEFAULT_THREAD_TIMEOUT: Final[float] = 30.0

_MUTABLE_CALLS: Final[frozenset[str]] = frozenset({"list", "dict", "set"})


@dataclass(frozen=True, slots=True)
class AstRuleSpec:
    """Static metadata for one AST rule."""

    name: str
    severity: int
    description: str
    category: str
    default_enabled: bool


RULE_SPECS: Final[tuple[AstRuleSpec, ...]] = (
    AstRuleSpec("BareExcept", 2, "Disallow bare 'except:' clauses.", "Error Prone", True),
    AstRuleSpec("MutableDefaultArgument", 3, "Disallow mutable default argument values.", "Error Prone", True),
    AstRuleSpec("NoPrintCalls", 4, "Disallow print() calls in library code.", "Best Practices", False),
    AstRuleSpec("NoWildcardImport", 3, "Disallow 'from module import *'.", "Best Practices", True),
    AstRuleSpec("AvoidAssertStatements", 4, "Avoid assert statements outside tests.", "Best Practices", False),
)


@dataclass(frozen=True, slots=True)
class Finding:
    """A rule hit located in a parsed module."""

    rule: str
    message: str
    line: int
    column: int
    end_line: int | None
    end_column: int | None


class _RuleVisitor(ast.NodeVisitor):
    """Collect findings for the enabled rule names in a single pass."""

    def __init__(self, enabled: frozenset[str]) -> None:
        self.enabled = enabled
        self.findings: list[Finding] = []

    def _record(self, rule: str, node: ast.AST, message: str) -> None:
        if rule not in self.enabled:
            return
        self.findings.append(
            Finding(
                rule=rule,
                message=message,
                line=getattr(node, "lineno", 1),
                column=getattr(node, "col_offset", 0) + 1,
                end_line=getattr(node, "end_lineno", None),
                end_column=_one_based(getattr(node, "end_col_offset", None)),
            )
        )

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self._record("BareExcept", node, "Bare 'except:' catches every exception, including SystemExit.")
        self.generic_visit(node)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._check_defaults(node)
        self.generic_visit(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._check_defaults(node)
        self.generic_visit(node)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self._check_defaults(node)
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:
        if isinstance(node.func, ast.Name) and node.func.id == "print":
            self._record("NoPrintCalls", node, "print() call found; use logging instead.")
        self.generic_visit(node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if any(alias.name == "*" for alias in node.names):
            self._record("NoWildcardImport", node, f"Wildcard import from '{node.module or '.'}'.")
        self.generic_visit(node)

    def visit_Assert(self, node: ast.Assert) -> None:
        self._record("AvoidAssertStatements", node, "assert statements are stripped under 'python -O'.")
        self.generic_visit(node)

    def _check_defaults(self, node: ast.FunctionDef | ast.AsyncFunctionDef | ast.Lambda) -> None:
        defaults = [*node.args.defaults, *(item for item in node.args.kw_defaults if item is not None)]
        for default in defaults:
            if _is_mutable(default):
                self._record("MutableDefaultArgument", default, "Mutable default argument is shared between calls.")


def _is_mutable(node: ast.expr) -> bool:
    if isinstance(node, (ast.List, ast.Dict, ast.Set, ast.ListComp, ast.DictComp, ast.SetComp)):
        return True
    return isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id in _MUTABLE_CALLS


def _one_based(value: int | None) -> int | None:
    return None if value is None else value + 1


def analyse_source(source: str, enabled: frozenset[str], *, filename: str = "<unknown>") -> list[Finding]:
    """Parse ``source`` and return findings for the ``enabled`` rules.

    Raises:
        SyntaxError: If ``source`` is not valid Python.
    """

    tree = ast.parse(source, filename=filename)
    visitor = _RuleVisitor(enabled)
    visitor.visit(tree)
    return visitor.findings


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


class PythonAstEngine(RuleEngine):
    """Run AST rules over Python files using a bounded pool of worker threads.

    ``SCANHUB_THREAD_COUNT`` caps concurrent file analyses and
    ``SCANHUB_THREAD_TIMEOUT`` bounds the wait for each file in seconds. A file
    that times out or fails to parse is reported as a warning and skipped. A
    timed-out analysis keeps its worker slot until its thread finishes, so the
    number of running threads never exceeds the configured count.
    """

    name = PYAST_ENGINE
    version = "1.0.0"
    default_target_patterns = ("**/*.py", "!**/node_modules/**", "!**/.venv/**")

    @property
    def thread_count(self) -> int:
        return _env_int(THREAD_COUNT_ENV, DEFAULT_THREAD_COUNT)

    @property
    def thread_timeout(self) -> float:
        return _env_float(THREAD_TIMEOUT_ENV, DEFAULT_THREAD_TIMEOUT)

    async def get_catalog(self) -> RawCatalog:
        await self.init()
        rules: list[dict[str, Any]] = []
        categories: list[str] = []
        for spec in RULE_SPECS:
            tags = [RECOMMENDED_TAG] if spec.default_enabled else []
            rules.append(
                {
                    "name": spec.name,
                    "engine": self.name,
                    "severity": spec.severity,
                    "tags": tags,
                    "categories": [spec.category],
                    "rulesets": [],
                    "languages": ["python"],
                    "description": spec.description,
                    "default_enabled": spec.default_enabled,
                }
            )
            if spec.category not in categories:
                categories.append(spec.category)
        return {
            "rules": rules,
            "categories": [{"name": name, "engine": self.name, "paths": []} for name in categories],
            "rulesets": [],
        }

    async def run(
        self,
        groups: Sequence[RuleGroup],
        rules: Sequence[Rule],
        targets: Sequence[RuleTarget],
    ) -> list[Violation]:
        await self.init()
        _ = groups
        by_name = {rule.name: rule for rule in rules}
        if not by_name:
            return []
        enabled = frozenset(by_name)
        files = [item for item in iter_target_files(targets) if item.path.suffix == ".py"]
        semaphore = asyncio.Semaphore(self.thread_count)
        timeout = self.thread_timeout

        async def _analyse(item: TargetFile) -> list[Violation]:
            await semaphore.acquire()
            worker = asyncio.ensure_future(asyncio.to_thread(self._analyse_file, item.path, enabled))
            # Released when the thread returns, even after a timeout.
            worker.add_done_callback(lambda _: semaphore.release())
            try:
                findings = await asyncio.wait_for(asyncio.shield(worker), timeout)
            except TimeoutError:
                self.warn(f"analysis of {item.display} exceeded {timeout:g}s and was skipped")
                return []
            return [self._to_violation(finding, by_name[finding.rule], item.display) for finding in findings]

        batches = await asyncio.gather(*(_analyse(item) for item in files))
        return [violation for batch in batches for violation in batch]

    def _analyse_file(self, path: Path, enabled: frozenset[str]) -> list[Finding]:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.warn(f"unable to read {path}: {exc}")
            return []
        try:
            return analyse_source(source, enabled, filename=str(path))
        except SyntaxError as exc:
            self.warn(f"skipping {path}: syntax error at line {exc.lineno}: {exc.msg}")
            return []

    def _to_violation(self, finding: Finding, rule: Rule, file: str) -> Violation:
        return Violation(
            rule=rule.name,
            engine=self.name,
            severity=rule.severity,
            file=file,
            message=finding.message,
            line=finding.line,
            column=finding.column,
            end_line=finding.end_line,
            end_column=finding.end_column,
            category=rule.categories[0] if rule.categories else None,
            resource_url=rule.resource_urls[0] if rule.resource_urls else None,
        )


__all__ = ["PYAST_ENGINE", "PythonAstEngine", "RULE_SPECS", "analyse_source"]
