"""
Taskboard Backend — Middleware Package
=======================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Access log measures the full handling time
    3. CORS answers preflight requests and adds CORS headers
"""
