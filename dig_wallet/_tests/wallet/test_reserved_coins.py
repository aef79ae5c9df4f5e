from __future__ import annotations

from pathlib import Path

import pytest
from chia_rs import Coin
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from dig_wallet.util.errors import SerializationError
from dig_wallet.util.hash import std_hash
from dig_wallet.wallet.reserved_coins import RESERVED_COINS_DIR, ReservedCoin, ReservedCoinCache


def coin(i: int) -> Coin:
    return Coin(std_hash(bytes([i])), bytes32(b"\x00" * 32), uint64(i + 1))


def test_reserve_and_expire(tmp_path: Path) -> None:
    reserved_coins = ReservedCoinCache.create(tmp_path, reservation_seconds=60)
    assert (tmp_path / RESERVED_COINS_DIR) == reserved_coins.cache.cache_dir
    reserved_coins.reserve([coin(1), coin(2)], now=1000)
    reserved_coins.reserve([coin(3)], now=1030)

    assert reserved_coins.reserved_coin_ids(now=1059) == {coin(1).name(), coin(2).name(), coin(3).name()}
    assert reserved_coins.reserved_coin_ids(now=1060) == {coin(3).name()}
    # expired reservations are removed from disk
    assert reserved_coins.cache.keys() == [coin(3).name().hex()]
    assert reserved_coins.reserved_coin_ids(now=2000) == set()


def test_release(tmp_path: Path) -> None:
    reserved_coins = ReservedCoinCache.create(tmp_path)
    reserved_coins.reserve([coin(1), coin(2)], now=0)
    reserved_coins.release([coin(1), coin(5)])
    assert reserved_coins.reserved_coin_ids(now=1) == {coin(2).name()}


def test_reservations_are_shared_through_the_root(tmp_path: Path) -> None:
    ReservedCoinCache.create(tmp_path).reserve([coin(7)], now=0)
    assert ReservedCoinCache.create(tmp_path).reserved_coin_ids(now=1) == {coin(7).name()}


def test_reserved_coin_json() -> None:
    reservation = ReservedCoin(coin(1).name(), uint64(123))
    assert reservation.to_json_dict() == {"coin_id": coin(1).name().hex(), "expiry": 123}
    assert ReservedCoin.from_json_dict(reservation.to_json_dict()) == reservation
    with pytest.raises(SerializationError):
        ReservedCoin.from_json_dict({"coin_id": "zz", "expiry": 1})
    with pytest.raises(SerializationError):
        ReservedCoin.from_json_dict({"expiry": 1})
