# Services package init
"""
Notes Backend - Services Layer
===============================

What:  Business logic between routes (HTTP) and the database.
How:   Built once by create_app() and reached through app.state; database
       sessions are passed into every call.

Service Inventory:
    - OtpService: issue / verify / purge one-time passcodes
    - TokenService: sign and verify JWT session tokens
    - GoogleIdentityVerifier: verify Google ID tokens
    - EmailService: SMTP delivery of passcode emails
    - UserService: users table access
    - AuthService: signup, login and Google flows
    - NoteService: owner-scoped note CRUD
"""
