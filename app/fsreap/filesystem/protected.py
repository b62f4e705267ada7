"""Ownership rules for entries that must never be deleted.

Entries owned by the superuser or the root group are left in place, as
are entries whose user or group id lies in a reserved range just below
the unsigned 32-bit ceiling. That range holds sentinel ids such as the
``(uid_t)-1`` "no owner" value and ids produced by some identity
mapping schemes for unmapped users.
"""

from fsreap.filesystem.models import Entry

# Ids strictly greater than this are reserved
RESERVED_ID_THRESHOLD = 0xFFFFFF00

_PRIVILEGED_ID = 0


def is_protected_id(owner_id: int) -> bool:
    """Check if a user or group id belongs to a protected identity."""
    return owner_id == _PRIVILEGED_ID or owner_id > RESERVED_ID_THRESHOLD


def is_protected_owner(entry: Entry) -> bool:
    """Check if an entry's ownership forbids deleting it.

    Args:
        entry: Inventoried entry.

    Returns:
        True if either the owning user or the owning group is protected.
    """
    return is_protected_id(entry.uid) or is_protected_id(entry.gid)
