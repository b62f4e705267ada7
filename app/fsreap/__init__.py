"""fsreap - least-recently-accessed cleanup for scratch filesystems.

Deletes the oldest-accessed entries of a directory tree until free space
and free inodes are back above a configured headroom.
"""

__version__ = "0.1.0"
