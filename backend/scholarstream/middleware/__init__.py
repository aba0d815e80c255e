# Middleware package init
"""
Scholar Stream Backend: Middleware Package
===========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Unhandled Error] → Route Handler

    Request ID runs first so the access log line and every error body
    carry the same correlation id. Responses unwind in reverse order.
"""
