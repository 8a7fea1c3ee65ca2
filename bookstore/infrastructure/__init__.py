"""Infrastructure Layer - external stores, logging setup and the realtime transport.

Invariants:
    - Infrastructure never imports from api/
    - Store failures surface as BookstoreError subclasses (core/errors.py)
"""
