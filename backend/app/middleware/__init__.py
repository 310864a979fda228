# Middleware package init
"""
SpellNote Backend - Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    - Request ID first, so every log line of the request can carry it
    - Logging measures the duration of everything behind it
"""
