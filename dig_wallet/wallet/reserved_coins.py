from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Collection, Dict, Optional, Set

from chia_rs import Coin
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from dig_wallet.util.byte_types import hexstr_to_bytes
from dig_wallet.util.default_root import DEFAULT_ROOT_PATH
from dig_wallet.util.errors import SerializationError
from dig_wallet.util.file_cache import FileCache

log = logging.getLogger(__name__)

RESERVED_COINS_DIR = "reserved_coins"
DEFAULT_RESERVATION_SECONDS = 300


@dataclass(frozen=True)
class ReservedCoin:
    coin_id: bytes32
    expiry: uint64

    def to_json_dict(self) -> Dict[str, Any]:
        return {"coin_id": self.coin_id.hex(), "expiry": int(self.expiry)}

    @classmethod
    def from_json_dict(cls, json_dict: Dict[str, Any]) -> ReservedCoin:
        try:
            return cls(bytes32(hexstr_to_bytes(json_dict["coin_id"])), uint64(json_dict["expiry"]))
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"malformed coin reservation: {e}") from e


class ReservedCoinCache:
    """
    Coins picked by a recent selection that haven't shown up as spent yet. Selections skip them until
    the reservation expires, so two spends built back to back don't pick the same coin.
    """

    def __init__(self, cache: FileCache, reservation_seconds: int = DEFAULT_RESERVATION_SECONDS) -> None:
        self.cache = cache
        self.reservation_seconds = reservation_seconds

    @classmethod
    def create(
        cls, root_path: Path = DEFAULT_ROOT_PATH, reservation_seconds: int = DEFAULT_RESERVATION_SECONDS
    ) -> ReservedCoinCache:
        return cls(FileCache.create(RESERVED_COINS_DIR, root_path), reservation_seconds)

    def reserve(self, coins: Collection[Coin], now: Optional[float] = None) -> None:
        expiry = uint64(int(time.time() if now is None else now) + self.reservation_seconds)
        for coin in coins:
            reservation = ReservedCoin(coin.name(), expiry)
            self.cache.set(reservation.coin_id.hex(), reservation.to_json_dict())
        log.debug(f"Reserved {len(coins)} coins until {expiry}")

    def release(self, coins: Collection[Coin]) -> None:
        for coin in coins:
            self.cache.delete(coin.name().hex())

    def reserved_coin_ids(self, now: Optional[float] = None) -> Set[bytes32]:
        """
        Ids of unexpired reservations. Expired ones are removed on the way.
        """
        current_time = int(time.time() if now is None else now)
        reserved: Set[bytes32] = set()
        for key in self.cache.keys():
            data = self.cache.get(key)
            if data is None:
                continue
            reservation = ReservedCoin.from_json_dict(data)
            if reservation.expiry <= current_time:
                self.cache.delete(key)
                continue
            reserved.add(reservation.coin_id)
        return reserved
