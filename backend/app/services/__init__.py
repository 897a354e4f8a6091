# Services package init
"""
Notes API — Services Layer
============================

What:  Business logic layer sitting between routes (HTTP) and the gateway (persistence).
Why:   Separation of concerns — routes handle HTTP, services handle business rules.

Service Inventory:
    - validation: pure payload checks, no store dependency
    - NoteService: note lifecycle operations over a NoteGateway
"""
