"""Classifier — maps one command segment to a ``Classification``.

Pipeline (per segment):
  1. ``normalize()``                     — None → Ignored
  2. ``is_ignored_command()``            — builtins, noise, already-compact → Ignored
  3. ``strip_command_prefixes()``        — sudo/env/NAME=value, one runner wrapper
  4. ``is_ignored_command()`` again      — ``uv run rtk git status`` → Ignored
  5. ``RuleRegistry.match()``            — last (highest-index) match wins
  6. no match → ``extract_base_command()`` → Unsupported, or Ignored when empty

``classify()`` is total: every input yields exactly one of Supported,
Unsupported or Ignored. It never raises for any input string.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in rtk_discover/discover/.
"""

from __future__ import annotations

from rtk_discover.constants import BASE_COMMAND_MAX_TOKENS
from rtk_discover.discover.normalizer import (
    is_ignored_command,
    normalize,
    strip_command_prefixes,
)
from rtk_discover.discover.rules import get_registry
from rtk_discover.models.classification import (
    IGNORED,
    Classification,
    Supported,
    Unsupported,
)
from rtk_discover.utils.logger import get_logger

logger = get_logger(__name__)


def classify(cmd: str) -> Classification:
    """Classify a single, already-split command segment.

    Subcommand resolution for the winning rule:
      - status:  per-subcommand override, else Passthrough for ``rtk proxy``
                 targets, else Existing
      - savings: per-subcommand override, else the rule default

    A pattern without a participating first group resolves as if no
    subcommand had been captured.
    """
    normalized = normalize(cmd)
    if normalized is None or is_ignored_command(normalized):
        return IGNORED

    cmd_clean = strip_command_prefixes(normalized)
    if not cmd_clean or is_ignored_command(cmd_clean):
        return IGNORED

    hit = get_registry().match(cmd_clean)
    if hit is None:
        base = extract_base_command(cmd_clean)
        if not base:
            return IGNORED
        logger.debug("Unsupported command", base_command_tokens=len(base.split()))
        return Unsupported(base_command=base)

    rule = hit.rule
    result = Supported(
        target=rule.target_name,
        category=rule.category,
        savings_pct=rule.savings_for(hit.subcommand),
        status=rule.status_for(hit.subcommand),
        subcommand=(hit.subcommand or "").strip(),
    )
    logger.debug(
        "Supported command",
        rule_index=hit.index,
        target=result.target,
        status=result.status.value,
        savings_pct=result.savings_pct,
    )
    return result


def extract_base_command(cmd: str) -> str:
    """Best-effort name for a command no rule matched.

    One token → that token. Two or more → ``"tool sub"`` (original spacing
    kept) when the second token looks like a subcommand: no leading ``-``,
    no ``/`` and no ``.``. Otherwise just the first token.

    ``terraform plan -var-file=prod.tfvars`` → ``"terraform plan"``;
    ``node ./server.js`` → ``"node"``.
    """
    cmd = cmd.strip()
    parts = cmd.split(None, BASE_COMMAND_MAX_TOKENS - 1)
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]

    first, second = parts[0], parts[1]
    if second.startswith("-") or "/" in second or "." in second:
        return first

    second_start = cmd.index(second, len(first))
    return cmd[:second_start + len(second)]
