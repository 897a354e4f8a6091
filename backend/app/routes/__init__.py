# Routes package init
"""
Notes API — API Routes Package
================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource or action.

Route Inventory:
    - notes.py:   /api/notes CRUD and /api/notes/tags/{tag} search
    - health.py:  GET /health (service and document store status)

Design Principle:
    Routes should be THIN — they handle HTTP concerns only:
    - Extract data from request (path params, body)
    - Call the appropriate service
    - Declare status code and response model

    Business logic belongs in services, not routes.
"""
