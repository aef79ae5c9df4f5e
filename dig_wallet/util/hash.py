from __future__ import annotations

from hashlib import sha256
from typing import SupportsBytes, Union

from chia_rs.sized_bytes import bytes32


def std_hash(b: Union[bytes, SupportsBytes]) -> bytes32:
    """
    The standard hash used for coin ids, checksums and synthetic key offsets.
    """
    return bytes32(sha256(bytes(b)).digest())
