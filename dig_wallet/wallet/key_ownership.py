from __future__ import annotations

from chia_rs import AugSchemeMPL, G1Element, G2Element, PrivateKey

from dig_wallet.util.byte_types import hexstr_to_bytes
from dig_wallet.util.errors import CryptoError

OWNERSHIP_MESSAGE_PREFIX = "Signing this message to prove ownership of key.\n\nNonce: "
PUBLIC_KEY_SIZE = 48  # G1Element
SIGNATURE_SIZE = 96  # G2Element


def ownership_message(nonce: str) -> bytes:
    return f"{OWNERSHIP_MESSAGE_PREFIX}{nonce}".encode("utf-8")


def sign_key_ownership(nonce: str, synthetic_secret_key: PrivateKey) -> str:
    """
    Signs the ownership message for `nonce` and returns the signature as hex.
    """
    return bytes(AugSchemeMPL.sign(synthetic_secret_key, ownership_message(nonce))).hex()


def _decode_hex(value: str, what: str, size: int) -> bytes:
    try:
        decoded = hexstr_to_bytes(value)
    except ValueError as e:
        raise CryptoError(f"{what} is not valid hex: {e}") from e
    if len(decoded) != size:
        raise CryptoError(f"{what} must be {size} bytes, got {len(decoded)}")
    return decoded


def verify_key_ownership(nonce: str, signature_hex: str, public_key_hex: str) -> bool:
    """
    Malformed input raises CryptoError. A well formed signature that does not verify returns False.
    """
    public_key_bytes = _decode_hex(public_key_hex, "public key", PUBLIC_KEY_SIZE)
    signature_bytes = _decode_hex(signature_hex, "signature", SIGNATURE_SIZE)
    try:
        public_key = G1Element.from_bytes(public_key_bytes)
    except ValueError as e:
        raise CryptoError(f"public key is not a valid G1 point: {e}") from e
    try:
        signature = G2Element.from_bytes(signature_bytes)
    except ValueError as e:
        raise CryptoError(f"signature is not a valid G2 point: {e}") from e
    return bool(AugSchemeMPL.verify(public_key, ownership_message(nonce), signature))
