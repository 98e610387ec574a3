"""
serializer.py
Provides utility functions for serializing and deserializing game events and state to/from JSON.
Used by the console front-end to dump the engine's turn log next to the transcript.
"""

import json
from fractions import Fraction
from typing import Any


def _default(o):
    if isinstance(o, Fraction):
        return float(o)
    if isinstance(o, bytes):
        return o.hex()
    return getattr(o, '__dict__', str(o))


def dumps(obj: Any) -> str:
    """
    Serialize a Python object (including dataclasses, fractions and bytes) to a JSON string.
    Args:
        obj: Object to serialize.
    Returns:
        str: JSON string.
    """
    return json.dumps(obj, default=_default)


def loads(s: str):
    """
    Deserialize a JSON string to a Python object (dict/list).
    Args:
        s (str): JSON string.
    Returns:
        object: Deserialized Python object.
    """
    return json.loads(s)
