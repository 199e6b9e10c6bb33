"""rtk-discover models package.

Defines the shared data contracts produced by the discover pipeline:

  - classification.py — Status, Supported, Unsupported, Ignored (the closed
                        Classification union returned by classify())
"""
