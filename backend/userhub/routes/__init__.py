# Routes package init
"""
UserHub Backend — API Routes Package
======================================

Route Inventory:
    - users.py:   GET/POST /users, GET/PUT/DELETE /users/{id}
    - health.py:  GET /healthdb  (database liveness probe)

Routes are thin: they extract request data, call UserService and wrap the
result in the response envelope.
"""
