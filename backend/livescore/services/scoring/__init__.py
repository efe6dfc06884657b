"""Match scoring engine.

Pure(ish) per-sport rules: cricket, goal/point and set engines behind a
tagged dispatch (``engines.ENGINES``), plus validation, lifecycle and
completion helpers shared between them. Nothing here commits to the
database; ``livescore.services.matches`` owns the load/save cycle.
"""
