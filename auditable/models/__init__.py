"""Change-tracking domain models.

Contains the Pydantic models handed out to callers:
- Delta for the (old, new) pair recorded per property
- ChangeSet for a detached snapshot of an instance's changes
"""

from auditable.models.change_set import ChangeSet
from auditable.models.delta import Delta

__all__ = [
    "ChangeSet",
    "Delta",
]
