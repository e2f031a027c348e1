# Routes package init
"""
NoteMe Backend — API Routes Package
====================================

Route Inventory:
    - actions.py:  POST/OPTIONS /api/post   (createUser, addNote)
    - health.py:   GET /health              (service + store health)

Design Principle:
    Routes are THIN: parse the request, call NotesService, shape the response.
    Validation order, id assignment and the read-modify-write cycle live in
    the service.
"""
