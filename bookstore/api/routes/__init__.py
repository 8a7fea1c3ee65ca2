"""Route Modules - one file per resource/concern.

Invariants:
    - Resource routers carry no prefix; compose.py binds prefixes and gates
    - Routes hold no cross-cutting logic (sessions, CORS, logging live in the pipeline)
"""
