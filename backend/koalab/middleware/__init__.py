# Middleware package init
"""
Koalab Backend: Middleware Package
===================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    Request ID runs first so the access log line and any error body carry
    the same correlation id.
"""
