# Middleware package init
"""
CampusNotes Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [OPTIONS] → [CORS] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. GZip: Compress responses over 500 bytes
    4. OPTIONS: Every OPTIONS request is answered with 200 plus CORS headers
    5. CORS: Starlette's CORSMiddleware (adds headers to actual requests)
"""
