"""Chain splitter — breaks an agent command line into independent segments.

Delimiters recognised outside quotes:

  - ``&&`` and ``||`` — segment boundary, scanning continues
  - ``;``             — segment boundary
  - newline / CR      — segment boundary, unless preceded by a line-continuation
                        backslash (the backslash-newline stays in the segment)
  - ``|``             — scanning stops; only the segment before the pipe is kept

Lines containing a heredoc (``<<``) or arithmetic expansion (``$((``) are
returned whole: their bodies may contain separator-like characters.

No shell grammar beyond quote tracking is attempted (no subshells, no
variable expansion).
"""

from __future__ import annotations

HEREDOC_MARKER = "<<"
ARITHMETIC_MARKER = "$(("


def split_chain(raw: str) -> list[str]:
    """Split ``raw`` on ``&&``, ``||``, ``;`` and newlines outside quotes.

    For a real pipe only the first command is kept: downstream commands
    consume the upstream output and are irrelevant to classification.

    Returns:
        Trimmed, non-empty segments in input order. Empty input → ``[]``.
    """
    trimmed = raw.strip()
    if not trimmed:
        return []

    if HEREDOC_MARKER in trimmed or ARITHMETIC_MARKER in trimmed:
        return [trimmed]

    segments: list[str] = []
    length = len(trimmed)
    start = 0
    i = 0
    in_single = False
    in_double = False
    pipe_seen = False

    def _emit(end: int) -> None:
        segment = trimmed[start:end].strip()
        if segment:
            segments.append(segment)

    while i < length:
        c = trimmed[i]
        nxt = trimmed[i + 1] if i + 1 < length else ""

        if c == "'" and not in_double:
            in_single = not in_single
            i += 1
            continue
        if c == '"' and not in_single:
            in_double = not in_double
            i += 1
            continue

        # Separators inside either quote state are inert
        if in_single or in_double:
            i += 1
            continue

        if c == "&" and nxt == "&":
            _emit(i)
            i += 2
            start = i
            continue

        if c == "|":
            if nxt == "|":
                _emit(i)
                i += 2
                start = i
                continue
            _emit(i)
            pipe_seen = True
            break

        if c == ";":
            _emit(i)
            i += 1
            start = i
            continue

        if c in ("\n", "\r"):
            if i > 0 and trimmed[i - 1] == "\\":
                i += 1
                continue
            _emit(i)
            i += 1
            start = i
            continue

        i += 1

    if not pipe_seen and start < length:
        _emit(length)

    return segments
