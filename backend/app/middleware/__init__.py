# Middleware package init
"""
Notes API — Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [CORS] → [Request ID] → [Logging] → Route Handler

    1. CORS first: preflight OPTIONS requests are answered without any
       further processing, and every other response leaves with CORS headers
    2. Request ID: generate correlation ID for logging and tracing
    3. Logging: log request details with the generated request ID
"""
