# Middleware package init
"""
Notes Backend - Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation id for logs and error envelopes
    2. Logging: access line carrying that id
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
