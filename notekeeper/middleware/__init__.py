# Middleware package init
"""
NoteKeeper Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

Request ID runs first so every access-log line and every error body of the
request carries the same correlation ID.
"""
