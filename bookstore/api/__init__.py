"""API Layer - request pipeline, FastAPI routes and error handlers.

Invariants:
    - Route groups mounted explicitly by routes/compose.py (no auto-discovery)
    - All error responses share the {"error": {...}} envelope
"""
