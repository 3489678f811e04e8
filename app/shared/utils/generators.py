"""ID generators (CUID2) for relay instance ids."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new CUID2 string (e.g. one per worker process for the relay origin)."""
    return cuid_generator()
