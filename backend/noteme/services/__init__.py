# Services package init
"""
NoteMe Backend — Services Layer
================================

What:  Business logic and persistence adapters between the routes and the
       remote document.
Why:   Routes handle HTTP; services handle business rules.

Service Inventory:
    - DocumentStore (abstract): read/write the one JSON document
    - JsonBinDocumentStore: JSONBin.io over httpx (production)
    - FileDocumentStore: local data.json via aiofiles
    - InMemoryDocumentStore: process-local store for tests and demos
    - DeployNotifier: best-effort deploy hook after each mutation
    - NotesService: createUser / addNote read-modify-write operations
"""
