"""HMAC signing for session cookie values.

A signed value looks like ``s:<value>.<signature>`` where the signature is
the unpadded URL-safe base64 of HMAC-SHA256 over ``<value>``.
"""
import base64
import hashlib
import hmac

SIGNED_PREFIX = "s:"


def _signature(value: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def sign(value: str, secret: str) -> str:
    return f"{SIGNED_PREFIX}{value}.{_signature(value, secret)}"


def unsign(signed_value: str | None, secret: str) -> str | None:
    """Return the embedded value if the signature verifies, else None.

    A bad signature and a missing cookie are indistinguishable to callers.
    """
    if not isinstance(signed_value, str) or not signed_value.startswith(SIGNED_PREFIX):
        return None

    value, dot, signature = signed_value[len(SIGNED_PREFIX):].rpartition(".")
    if not dot or not value or not signature:
        return None

    expected = _signature(value, secret)
    if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8", "replace")):
        return None
    return value
