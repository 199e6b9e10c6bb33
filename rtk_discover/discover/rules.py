"""Rule definitions for the command classifier.

Two index-aligned tables:

  ``PATTERNS[i]`` — google-re2 source recognising a tool at line start; group 1,
                    when present, captures the subcommand.
  ``RULES[i]``    — the compact equivalent ``PATTERNS[i]`` maps to.

ORDER IS PRECEDENCE: when several patterns match, the one with the highest
index wins. Generic rules come first, refinements later (``python`` before
``python -m pytest``). Never re-sort these tables.

The compiled ``RuleRegistry`` is built lazily, exactly once, under a lock.
After that it is read-only and shared by every caller without locking.
A misaligned or malformed table raises ``RegistryError`` on first access;
that is a programming defect, not a runtime condition to recover from.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in rtk_discover/discover/.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import re2  # google-re2 — NOT stdlib re

from rtk_discover.constants import DEFAULT_CATEGORY_AVG_TOKENS, PROXY_TARGET_PREFIX
from rtk_discover.models.classification import Status
from rtk_discover.utils.logger import get_logger

logger = get_logger(__name__)


class RegistryError(RuntimeError):
    """The pattern/rule tables are inconsistent. Fix the tables, do not catch this."""


# ---------------------------------------------------------------------------
# Rule dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A compact equivalent for one pattern.

    Fields:
        target_name:         Compact-equivalent command (e.g. ``"rtk git"``).
                             A ``"rtk proxy "`` prefix marks forwarding targets.
        category:            Reporting category; keys ``category_avg_tokens()``.
        default_savings_pct: Savings estimate when no subcommand override applies.
        subcommand_savings:  Ordered ``(subcommand, pct)`` overrides.
        subcommand_status:   Ordered ``(subcommand, Status)`` overrides.
    """
    target_name: str
    category: str
    default_savings_pct: float
    subcommand_savings: tuple[tuple[str, float], ...] = ()
    subcommand_status: tuple[tuple[str, Status], ...] = ()

    @property
    def is_proxy(self) -> bool:
        return self.target_name.startswith(PROXY_TARGET_PREFIX)

    @property
    def default_status(self) -> Status:
        return Status.PASSTHROUGH if self.is_proxy else Status.EXISTING

    def savings_for(self, subcommand: Optional[str]) -> float:
        if subcommand is not None:
            for name, pct in self.subcommand_savings:
                if name == subcommand:
                    return pct
        return self.default_savings_pct

    def status_for(self, subcommand: Optional[str]) -> Status:
        if subcommand is not None:
            for name, status in self.subcommand_status:
                if name == subcommand:
                    return status
        return self.default_status


# ===========================================================================
# PATTERNS (index-aligned with RULES)
# ===========================================================================

PATTERNS: tuple[str, ...] = (
    r'^git\s+(status|log|diff|show|add|commit|push|pull|branch|fetch|stash|worktree)',
    r'^gh\s+(pr|issue|run|repo|api)',
    r'^cargo\s+(build|test|clippy|check|fmt)',
    r'^pnpm\s+(list|ls|outdated|install)',
    r'^npm\s+(run|exec)',
    r'^npx\s+',
    r'^(cat|head|tail)\s+',
    r'^(rg|grep)\s+',
    r'^ls(\s|$)',
    r'^find\s+',
    r'^(npx\s+|pnpm\s+)?tsc(\s|$)',
    r'^(npx\s+|pnpm\s+)?(eslint|biome|lint)(\s|$)',
    r'^(npx\s+|pnpm\s+)?prettier',
    r'^(npx\s+|pnpm\s+)?next\s+build',
    r'^(pnpm\s+|npx\s+)?(vitest|jest|test)(\s|$)',
    r'^(npx\s+|pnpm\s+)?playwright',
    r'^(npx\s+|pnpm\s+)?prisma',
    r'^docker\s+(compose|ps|images|logs|run|build|exec)(\s|$)',
    r'^kubectl\s+(get|logs|describe|apply)(\s|$)',
    r'^gcloud(\s|$)',
    r'^bq(\s|$)',
    r'^sqlite3(\s|$)',
    r'^curl\s+',
    r'^wget\s+',
    r'^python(3)?(\s|$)',
    r'^(python(3)?\s+-m\s+)?pytest(\s|$)',
    r'^(python(3)?\s+-m\s+)?ruff(\s|$)',
    r'^pip\s+(list|outdated|install|show)(\s|$)',
)


# ===========================================================================
# RULES (index-aligned with PATTERNS)
# ===========================================================================

RULES: tuple[Rule, ...] = (
    # ─── Version control ──────────────────────────────────────────────────
    Rule(
        target_name="rtk git",
        category="Git",
        default_savings_pct=70.0,
        subcommand_savings=(("diff", 80.0), ("show", 80.0), ("add", 59.0), ("commit", 59.0)),
    ),
    Rule(
        target_name="rtk gh",
        category="GitHub",
        default_savings_pct=82.0,
        subcommand_savings=(("pr", 87.0), ("run", 82.0), ("issue", 80.0)),
    ),
    # ─── Rust ─────────────────────────────────────────────────────────────
    Rule(
        target_name="rtk cargo",
        category="Cargo",
        default_savings_pct=80.0,
        subcommand_savings=(("test", 90.0), ("check", 80.0)),
        subcommand_status=(("fmt", Status.PASSTHROUGH),),
    ),
    # ─── JavaScript package managers ──────────────────────────────────────
    Rule(target_name="rtk pnpm", category="PackageManager", default_savings_pct=80.0),
    Rule(target_name="rtk npm", category="PackageManager", default_savings_pct=70.0),
    Rule(target_name="rtk npx", category="PackageManager", default_savings_pct=70.0),
    # ─── Files ────────────────────────────────────────────────────────────
    Rule(target_name="rtk read", category="Files", default_savings_pct=60.0),
    Rule(target_name="rtk grep", category="Files", default_savings_pct=75.0),
    Rule(target_name="rtk ls", category="Files", default_savings_pct=65.0),
    Rule(target_name="rtk find", category="Files", default_savings_pct=70.0),
    # ─── JavaScript build / lint / test ───────────────────────────────────
    Rule(target_name="rtk tsc", category="Build", default_savings_pct=83.0),
    Rule(target_name="rtk lint", category="Build", default_savings_pct=84.0),
    Rule(target_name="rtk prettier", category="Build", default_savings_pct=70.0),
    Rule(target_name="rtk next", category="Build", default_savings_pct=87.0),
    Rule(target_name="rtk vitest", category="Tests", default_savings_pct=99.0),
    Rule(target_name="rtk playwright", category="Tests", default_savings_pct=94.0),
    Rule(target_name="rtk prisma", category="Build", default_savings_pct=88.0),
    # ─── Infrastructure ───────────────────────────────────────────────────
    Rule(target_name="rtk docker", category="Infra", default_savings_pct=85.0),
    Rule(target_name="rtk kubectl", category="Infra", default_savings_pct=85.0),
    # ─── Forwarded (no native equivalent) ─────────────────────────────────
    Rule(target_name="rtk proxy gcloud", category="Cloud", default_savings_pct=0.0),
    Rule(target_name="rtk proxy bq", category="Data", default_savings_pct=0.0),
    Rule(target_name="rtk proxy sqlite3", category="Data", default_savings_pct=0.0),
    # ─── Network ──────────────────────────────────────────────────────────
    Rule(target_name="rtk curl", category="Network", default_savings_pct=70.0),
    Rule(target_name="rtk wget", category="Network", default_savings_pct=65.0),
    # ─── Python ───────────────────────────────────────────────────────────
    Rule(target_name="rtk proxy python", category="Scripts", default_savings_pct=0.0),
    Rule(target_name="rtk pytest", category="Tests", default_savings_pct=90.0),
    Rule(target_name="rtk ruff", category="Build", default_savings_pct=84.0),
    Rule(target_name="rtk pip", category="PackageManager", default_savings_pct=70.0),
)


# ===========================================================================
# Output-size estimates per category
# ===========================================================================

# (category, subcommand) → tokens; subcommand "" is the category default.
_CATEGORY_AVG_TOKENS: dict[tuple[str, str], int] = {
    ("Git", "log"): 200,
    ("Git", "diff"): 200,
    ("Git", "show"): 200,
    ("Git", ""): 40,
    ("Cargo", "test"): 500,
    ("Cargo", ""): 150,
    ("Tests", ""): 800,
    ("Files", ""): 100,
    ("Build", ""): 300,
    ("Infra", ""): 120,
    ("Cloud", ""): 220,
    ("Data", ""): 260,
    ("Scripts", ""): 180,
    ("Network", ""): 150,
    ("GitHub", ""): 200,
    ("PackageManager", ""): 150,
}


def category_avg_tokens(category: str, subcommand: str) -> int:
    """Default output-size estimate (tokens) when no real output length is known."""
    specific = _CATEGORY_AVG_TOKENS.get((category, subcommand))
    if specific is not None:
        return specific
    return _CATEGORY_AVG_TOKENS.get((category, ""), DEFAULT_CATEGORY_AVG_TOKENS)


# ===========================================================================
# RuleRegistry
# ===========================================================================


@dataclass(frozen=True)
class RuleMatch:
    """The winning rule for a command and the subcommand its pattern captured."""
    index: int
    rule: Rule
    subcommand: Optional[str]


class RuleRegistry:
    """Compiled, validated view of an index-aligned pattern/rule table.

    Construction validates:
      - ``len(patterns) == len(rules)``
      - every pattern compiles under google-re2
      - every savings percentage lies within 0–100
      - every subcommand override name appears in its own pattern, which
        catches tables shifted out of alignment

    Raises:
        RegistryError: on any violation.
    """

    def __init__(self, patterns: Sequence[str], rules: Sequence[Rule]) -> None:
        if len(patterns) != len(rules):
            raise RegistryError(
                f"PATTERNS and RULES must be aligned: {len(patterns)} patterns, "
                f"{len(rules)} rules"
            )

        compiled: list[Any] = []
        for index, (source, rule) in enumerate(zip(patterns, rules)):
            try:
                compiled.append(re2.compile(source))
            except re2.error as exc:
                raise RegistryError(
                    f"Pattern {index} ({source!r}) for {rule.target_name!r} does not compile: {exc}"
                ) from exc
            _validate_rule(index, source, rule)

        self._patterns: tuple[Any, ...] = tuple(compiled)
        self._group_counts: tuple[int, ...] = tuple(p.groups for p in compiled)
        self._rules: tuple[Rule, ...] = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def match(self, cmd: str) -> Optional[RuleMatch]:
        """Return the highest-index matching rule, or None.

        Scans from the end of the table so the first hit is the last match.
        """
        for index in range(len(self._patterns) - 1, -1, -1):
            m = self._patterns[index].search(cmd)
            if m is None:
                continue
            subcommand = m.group(1) if self._group_counts[index] >= 1 else None
            return RuleMatch(index=index, rule=self._rules[index], subcommand=subcommand)
        return None


def _validate_rule(index: int, source: str, rule: Rule) -> None:
    pcts = [rule.default_savings_pct] + [pct for _, pct in rule.subcommand_savings]
    for pct in pcts:
        if not 0.0 <= pct <= 100.0:
            raise RegistryError(
                f"Rule {index} ({rule.target_name!r}) has savings {pct} outside 0–100"
            )
    names = [name for name, _ in rule.subcommand_savings] + [
        name for name, _ in rule.subcommand_status
    ]
    for name in names:
        if name not in source:
            raise RegistryError(
                f"Rule {index} ({rule.target_name!r}) overrides subcommand {name!r} "
                f"that its pattern {source!r} never captures — tables out of alignment?"
            )


# ─── Process-wide registry ────────────────────────────────────────────────────

_registry: Optional[RuleRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> RuleRegistry:
    """Return the process-wide registry, building it on first use.

    Double-checked under a lock: concurrent first callers build it once;
    later readers never take the lock.
    """
    global _registry
    registry = _registry
    if registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = RuleRegistry(PATTERNS, RULES)
                logger.debug("Rule registry built", rules=len(_registry))
            registry = _registry
    return registry
