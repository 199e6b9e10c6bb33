"""rtk-discover command interpretation pipeline.

  - splitter.py   — split_chain(): quote-aware chain splitting with pipe truncation
  - normalizer.py — normalize(), ignore tables, env/sudo and runner-wrapper stripping
  - rules.py      — PATTERNS/RULES tables, RuleRegistry, category_avg_tokens()
  - classifier.py — classify(), extract_base_command()
  - report.py     — discover_commands(): aggregate classifications over many lines

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this package.
"""
