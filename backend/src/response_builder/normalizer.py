"""Payload shape normalization for the envelope's ``data`` key."""

from typing import Any


def normalize_data(data: Any, always_object: bool) -> Any:
    """Return ``data`` in the shape the envelope carries.

    ``None`` becomes an empty dict when ``always_object`` is set, so clients
    always see an object under ``data``. Everything else, including lists and
    empty containers, is returned as the very same object. Content is not
    inspected.
    """
    if data is None:
        return {} if always_object else None
    return data
