# Services package init
"""
PIM Backend — Services Layer
=============================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - OwnedRepository: userId-scoped CRUD, generic over the three models
    - NoteService / ContactService / TaskService: per-resource rules
    - AuthResolver: verified token → Identity
    - validation: email / phone format rules shared with the schemas
"""
