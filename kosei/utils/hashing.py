"""Stable content fingerprints for paragraphs."""

from __future__ import annotations


def hash_string(text: str) -> str:
    """Return a 32-bit rolling hash of ``text`` as lowercase hex.

    The hash walks UTF-16 code units (``h = h * 31 + unit``) so fingerprints
    stored in ignore lists by an editor host written against UTF-16 strings
    stay comparable.
    """

    value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + unit) & 0xFFFFFFFF
    return format(value, "x")
