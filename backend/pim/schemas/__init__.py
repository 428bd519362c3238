"""
PIM Backend — Pydantic Schemas
===============================

One module per resource (note, contact, task) plus `common` for the
camelCase base model, error envelope and health response.
"""
