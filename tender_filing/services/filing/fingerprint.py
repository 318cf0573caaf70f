"""Content fingerprints used to detect byte-identical re-uploads."""

import hashlib


def fingerprint(content: bytes) -> str:
    """Return the 32-character MD5 hex digest of ``content``.

    MD5 is used for duplicate detection only, never for integrity or security.
    """
    return hashlib.md5(content, usedforsecurity=False).hexdigest()
