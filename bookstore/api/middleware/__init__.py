"""Middleware Pipeline - ordered request stages and their driver.

Registration order (build_default_stages):
    1. body parsing   2. request logging   3. CORS
    4. session        5. access logging

Invariants:
    - CORS runs before session: rejected origins never create sessions
    - Body parsing runs before any handler reads the body
"""

from bookstore.api.middleware.body import BodyParsingStage
from bookstore.api.middleware.cors import CorsStage
from bookstore.api.middleware.driver import RequestPipelineMiddleware
from bookstore.api.middleware.request_logging import AccessLogStage, RequestLoggingStage
from bookstore.api.middleware.session import SessionStage
from bookstore.config import Settings
from bookstore.core.pipeline import Stage
from bookstore.core.repository_protocols import SessionStore


def build_default_stages(settings: Settings, store: SessionStore) -> tuple[Stage, ...]:
    return (
        BodyParsingStage(),
        RequestLoggingStage(),
        CorsStage(settings.frontend_url),
        SessionStage(
            store,
            secret=settings.session_secret,
            cookie_name=settings.session_cookie_name,
            ttl_seconds=settings.session_ttl_seconds,
            secure=settings.session_cookie_secure,
        ),
        AccessLogStage(),
    )


__all__ = ["RequestPipelineMiddleware", "build_default_stages"]
