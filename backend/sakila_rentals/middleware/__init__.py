"""
Sakila Rentals Backend — Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Access Logging] → Route Handler

    The request ID is assigned first so the access log line and every log
    entry written while handling the request carry it.
"""
