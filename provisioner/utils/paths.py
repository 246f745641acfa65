"""
Path helpers.
"""

import os


def expand_path(value: str) -> str:
    """Expand ``~`` and environment variables (uses ``HOME``)."""
    return os.path.expandvars(os.path.expanduser(value))
