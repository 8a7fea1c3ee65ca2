"""Bookstore API Package - HTTP server for the online bookstore.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
