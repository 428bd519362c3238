# Routes package init
"""
PIM Backend — API Routes Package
=================================

Route Inventory:
    - notes.py:     /notes, /notes/{id}
    - contacts.py:  /contacts, /contacts/{id}
    - tasks.py:     /tasks, /tasks/{id}
    - health.py:    GET /health

Routes are thin: authenticate, call a service, pick the status code.
"""
