# Middleware package init
"""
UserHub Backend — Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [CORS] → [Request ID] → [Logging] → Route Handler

    1. CORS first: OPTIONS requests are answered before any other work,
       and every other response gets the CORS headers on the way out
    2. Request ID: correlation ID for logs and the X-Request-ID header
    3. Logging: access line with status and duration
"""
