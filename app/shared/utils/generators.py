"""ID and value generators (CUID2-based)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

BEHAVIOR_ID_PREFIX = "bhv_"


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_behavior_id() -> str:
    """Return a fresh workflow-scoped behavior id (e.g. 'bhv_tz4a98xxat96iws9zmbrgj3a')."""
    return f"{BEHAVIOR_ID_PREFIX}{generate_cuid()}"
