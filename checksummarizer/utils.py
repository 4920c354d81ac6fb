"""Webhook signature helpers."""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from checksummarizer.errors import ValidationError

SIGNATURE_ALGORITHMS = {
    "sha256": hashlib.sha256,
    "sha1": hashlib.sha1,
}


def gh_verify(
    secret: str,
    body: bytes,
    signature_header: Optional[str],
    algorithm: str = "sha256",
) -> bool:
    """
    Verify a GitHub webhook HMAC signature made with ``algorithm``
    (``sha256`` for ``X-Hub-Signature-256``, ``sha1`` for the legacy
    ``X-Hub-Signature``).

    Returns
    -------
    bool
        True if valid, False otherwise.
    """
    if not signature_header or "=" not in signature_header:
        return False
    algo, sig = signature_header.split("=", 1)
    if algo.strip().lower() != algorithm:
        return False
    sig = sig.strip().lower()
    # compare_digest only takes ASCII str; headers arrive latin-1 decoded.
    if not sig.isascii():
        return False
    digestmod = SIGNATURE_ALGORITHMS[algorithm]
    mac = hmac.new(secret.encode(), msg=body, digestmod=digestmod).hexdigest()
    return hmac.compare_digest(mac, sig)


def validate_payload(
    secret: str,
    body: bytes,
    signature_256: Optional[str],
    signature_1: Optional[str] = None,
) -> bytes:
    """
    Return ``body`` once its signature checks out.

    The SHA-256 header wins when both are present; the SHA-1 one is only
    consulted for senders that do not provide it.
    """
    if signature_256:
        header, algorithm = signature_256, "sha256"
    elif signature_1:
        header, algorithm = signature_1, "sha1"
    else:
        raise ValidationError("missing signature header")
    if not gh_verify(secret, body, header, algorithm):
        raise ValidationError("payload signature does not match")
    return body
