"""Normalizer — reduces one command segment to a canonical, classifiable form.

Two stages:

  ``normalize()``            strips presentation noise: surrounding whitespace,
                             extra lines of a multi-line snippet, shell prompt
                             markers, a leading escape backslash, and bare
                             ALL_CAPS symbols that are not commands.
  ``strip_command_prefixes()`` strips execution decoration: leading ``sudo`` /
                             ``env`` / ``NAME=value`` assignments and one runner
                             wrapper (``uv run``, ``npm exec --`` …), so wrapped
                             commands classify like their unwrapped form.

``is_ignored_command()`` rejects shell builtins, control-flow keywords, trivial
utilities and commands that already run through the compact tool.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in rtk_discover/discover/.
"""

from __future__ import annotations

from typing import Optional

import re2  # google-re2 — NOT stdlib re

# ─── Ignore tables ────────────────────────────────────────────────────────────

# Commands starting with any of these are never classified.
IGNORED_PREFIXES: tuple[str, ...] = (
    "#",
    "//",
    "```",
    "cd ",
    "cd\t",
    "echo ",
    "printf ",
    "export ",
    "source ",
    "mkdir ",
    "rm ",
    "mv ",
    "cp ",
    "chmod ",
    "chown ",
    "touch ",
    "which ",
    "type ",
    "command ",
    "test ",
    "sleep ",
    "kill ",
    "set ",
    "unset ",
    "wc ",
    "sort ",
    "uniq ",
    "tr ",
    "cut ",
    "awk ",
    "sed ",
    "python3 -c",
    "python -c",
    "node -e",
    "ruby -e",
    "rtk ",
    "bash ",
    "sh ",
    "then\n",
    "then ",
    "else\n",
    "else ",
    "do\n",
    "do ",
    "for ",
    "while ",
    "if ",
    "case ",
)

# Commands equal to any of these are never classified.
IGNORED_EXACT: frozenset[str] = frozenset({
    "cd", "echo", "true", "false", "wait", "pwd", "bash", "sh",
})

# Leading words ignored only as whole words (``fi`` must not swallow ``find``).
IGNORED_WORDS: frozenset[str] = frozenset({
    "true", "false", "wait", "pwd", "fi", "done",
})

# Lines starting with these are skipped when picking the first line of a snippet.
_NON_COMMAND_LINE_PREFIXES: tuple[str, ...] = ("#", "//", "```")

# Shell prompt markers copied along with a command.
PROMPT_MARKERS: tuple[str, ...] = ("$ ", "% ", "> ")

# ─── Compiled prefix patterns ─────────────────────────────────────────────────
# COMPILED AT MODULE LOAD, never per-call

# One or more leading ``sudo ``, ``env `` or ``UPPER_NAME=value `` tokens.
ENV_PREFIX = re2.compile(r'^(?:sudo\s+|env\s+|[A-Z_][A-Z0-9_]*=[^\s]*\s+)+')

# One runner wrapper that re-runs the rest of the line verbatim.
RUNNER_PREFIX = re2.compile(
    r'^(?:(?:uv|poetry|pipenv|hatch|rye)\s+run\s+|(?:npm|pnpm)\s+exec(?:\s+--)?\s+)'
)

# A lone environment-variable-looking symbol, e.g. ``ADMIN_TOKEN``.
BARE_ENV_TOKEN = re2.compile(r'^[A-Z_][A-Z0-9_]*$')


# ─── Normalization ────────────────────────────────────────────────────────────


def _first_meaningful_line(text: str) -> str:
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith(_NON_COMMAND_LINE_PREFIXES):
            return line
    return ""


def _strip_prompt_markers(text: str) -> str:
    while True:
        for marker in PROMPT_MARKERS:
            if text.startswith(marker):
                text = text[len(marker):].lstrip()
                break
        else:
            return text


def normalize(cmd: str) -> Optional[str]:
    """Reduce ``cmd`` to its canonical form, or None when it is not a command.

    Steps:
      1. Trim; empty → None.
      2. Multi-line input: keep the first line that is non-empty and is not a
         comment or code-fence line; none → None.
      3. Strip ``$ ``, ``% ``, ``> `` prompt markers repeatedly.
      4. Strip one leading escape backslash (``\\ cp file`` → ``cp file``).
      5. Empty → None.
      6. A bare ALL_CAPS symbol (``ADMIN_TOKEN``) is noise → None.
    """
    normalized = cmd.strip()
    if not normalized:
        return None

    if "\n" in normalized:
        normalized = _first_meaningful_line(normalized)
        if not normalized:
            return None

    normalized = _strip_prompt_markers(normalized)

    if normalized.startswith("\\"):
        normalized = normalized[1:].lstrip()

    if not normalized:
        return None

    if BARE_ENV_TOKEN.search(normalized):
        return None

    return normalized


def is_ignored_command(cmd: str) -> bool:
    """True for builtins, trivial utilities, control flow and already-compact commands."""
    if cmd in IGNORED_EXACT:
        return True
    if cmd.startswith(IGNORED_PREFIXES):
        return True
    words = cmd.split(None, 1)
    return bool(words) and words[0].rstrip(";") in IGNORED_WORDS


def strip_env_prefix(cmd: str) -> str:
    """Strip a leading chain of ``sudo`` / ``env`` / ``NAME=value`` tokens."""
    m = ENV_PREFIX.search(cmd)
    if m is None:
        return cmd
    return cmd[m.end():]


def strip_runner_wrapper(cmd: str) -> str:
    """Strip one leading runner wrapper (``uv run``, ``poetry run``, ``npm exec --`` …)."""
    m = RUNNER_PREFIX.search(cmd)
    if m is None:
        return cmd
    return cmd[m.end():]


def strip_command_prefixes(cmd: str) -> str:
    """Strip environment decoration then one runner wrapper; result is trimmed."""
    stripped_env = strip_env_prefix(cmd).strip()
    return strip_runner_wrapper(stripped_env).strip()
