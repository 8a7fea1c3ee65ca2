"""Core Layer - pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure and deterministic apart from id/salt generation

Design Decisions:
    - Functional core separated from imperative shell
"""
