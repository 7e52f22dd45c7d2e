# Services package init
"""
NoteKeeper Backend — Services Layer
=====================================

What:  Everything between the HTTP routes and the external platforms.

Service Inventory:
    - NoteListController: in-memory note list + fetch/create/delete workflows
    - NotesApi (abstract): notes platform contract
        - GraphQLNotesApi: hosted GraphQL platform over httpx
        - DatabaseNotesApi: self-hosted platform on async SQLAlchemy
    - ObjectStore (abstract): attachment blob store contract
        - LocalObjectStore: local disk + signed, expiring URLs
    - AttachmentService: upload validation (extension, size, MIME)
    - Authenticator / TokenAuthenticator: sign-in gate and sign-out
"""
