"""
PIM Backend — ORM Models
=========================

Importing this package registers every table on `Base.metadata`
(used by Alembic autogenerate and Database.create_all()).
"""

from pim.models.contact import Contact
from pim.models.note import Note
from pim.models.task import Task

__all__ = ["Contact", "Note", "Task"]
