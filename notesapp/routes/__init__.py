# Routes package init
"""
Notes Backend - API Routes Package
===================================

Route Inventory:
    - auth.py:    /api/auth/*            (OTP signup/login, Google, me, logout)
    - notes.py:   /api/notes, /api/notes/{id}  (owner-scoped CRUD)
    - health.py:  GET /health            (database probe)

Design Principle:
    Routes are THIN: parse the request, call a service, wrap the result in
    the success envelope. Failures are raised and handled globally.
"""
