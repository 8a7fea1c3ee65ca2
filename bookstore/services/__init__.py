"""Services Layer - event bus, built-in subscribers and scheduled jobs.

Invariants:
    - Services receive their dependencies explicitly (no module-level singletons)
"""
