"""
Text utility functions.
"""
import hashlib


def hash_source_text(source_text: str) -> str:
    """
    MD5 hex digest of the source text.

    Used to group generations and error logs by input for analytics; not a
    security boundary.
    """
    return hashlib.md5(source_text.encode("utf-8")).hexdigest()


def truncate(text: str, max_length: int) -> str:
    """Cut ``text`` to at most ``max_length`` characters."""
    if len(text) <= max_length:
        return text
    return text[:max_length]
