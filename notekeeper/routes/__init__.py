# Routes package init
"""
NoteKeeper Backend — API Routes Package
=========================================

Route Inventory:
    - notes.py:   GET    /api/notes              (load / refresh the list)
                  POST   /api/notes              (create form)
                  DELETE /api/notes/{id}         (delete button)
    - files.py:   GET    /api/files/{key}        (signed attachment download)
    - auth.py:    POST   /api/auth/sign-out      (sign-out button)
    - health.py:  GET    /health                 (service health check)

Routes stay thin: request parsing and status codes here, workflows in
NoteListController.
"""
