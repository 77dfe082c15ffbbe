"""
Job identifier generation.
"""

import secrets

ID_BYTES = 16


def new_job_id() -> str:
    """Returns a fresh 128-bit random identifier encoded as 32 hex characters."""
    return secrets.token_hex(ID_BYTES)
