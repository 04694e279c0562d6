"""Caller identities for the arbitration gateway.

Identities are plain DID strings. Every mutating call carries the caller
identity explicitly; the gateway trusts it as supplied by the runtime.

Keys can be turned into identities with ``identity_from_public_key`` so an
operator or requester can be named by the Ed25519 key they already hold.
The encoding is ``did:key`` with a base64url multibase value (prefix ``u``)
over the multicodec-tagged raw public key.
"""

from __future__ import annotations

import base64

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from .exceptions import InvalidIdentityError

DID_KEY_PREFIX = "did:key:"
MULTIBASE_BASE64URL = "u"
ED25519_MULTICODEC = b"\xed\x01"
ED25519_PUBLIC_KEY_SIZE = 32


def validate_identity(value: object) -> str:
    """Check that a value is a representable identity.

    Args:
        value: Candidate identity

    Returns:
        The identity, unchanged

    Raises:
        InvalidIdentityError: If the value is not a non-empty string
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdentityError(
            "Identity must be a non-empty string",
            {"identity": repr(value)},
        )
    return value


def identity_from_public_key(public_key: Ed25519PublicKey | bytes) -> str:
    """Derive a did:key identity from an Ed25519 public key."""
    if isinstance(public_key, Ed25519PublicKey):
        raw = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    else:
        raw = bytes(public_key)

    if len(raw) != ED25519_PUBLIC_KEY_SIZE:
        raise InvalidIdentityError(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_SIZE} bytes",
            {"length": len(raw)},
        )

    encoded = base64.urlsafe_b64encode(ED25519_MULTICODEC + raw).decode().rstrip("=")
    return f"{DID_KEY_PREFIX}{MULTIBASE_BASE64URL}{encoded}"


def public_key_from_identity(identity: str) -> Ed25519PublicKey:
    """Recover the Ed25519 public key behind a did:key identity.

    Raises:
        InvalidIdentityError: If the identity was not derived from an Ed25519 key
    """
    validate_identity(identity)
    prefix = DID_KEY_PREFIX + MULTIBASE_BASE64URL
    if not identity.startswith(prefix):
        raise InvalidIdentityError("Not a base64url did:key identity", {"identity": identity})

    encoded = identity[len(prefix) :]
    try:
        decoded = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    except ValueError as e:
        raise InvalidIdentityError("Malformed did:key value", {"identity": identity}) from e

    if not decoded.startswith(ED25519_MULTICODEC) or len(decoded) != len(ED25519_MULTICODEC) + ED25519_PUBLIC_KEY_SIZE:
        raise InvalidIdentityError("did:key does not carry an Ed25519 key", {"identity": identity})

    return Ed25519PublicKey.from_public_bytes(decoded[len(ED25519_MULTICODEC) :])


def generate_identity() -> tuple[str, Ed25519PrivateKey]:
    """Generate a fresh signing key and its identity.

    Returns:
        Tuple of (identity, private_key)
    """
    private_key = Ed25519PrivateKey.generate()
    return identity_from_public_key(private_key.public_key()), private_key
