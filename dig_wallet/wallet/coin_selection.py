from __future__ import annotations

import logging
from typing import Collection, List, Optional

from chia_rs import Coin
from chia_rs.sized_bytes import bytes32

from dig_wallet.util.errors import NoUnspentCoins

log = logging.getLogger(__name__)


def sort_coins(coins: Collection[Coin]) -> List[Coin]:
    """
    Largest amount first; equal amounts in ascending coin id order. A coin listed more than once
    is kept once.
    """
    unique_coins = {coin.name(): coin for coin in coins}
    return sorted(unique_coins.values(), key=lambda c: (-c.amount, c.name()))


def select_coins(
    coins: Collection[Coin],
    target: int,
    omit_coin_ids: Collection[bytes32] = (),
) -> List[Coin]:
    """
    Returns coins whose amounts add up to at least `target`. The same candidates and target always
    give the same result, whatever order the candidates arrive in.
    """
    omitted = set(omit_coin_ids)
    valid_spendable_coins = sort_coins([coin for coin in coins if coin.name() not in omitted])
    sum_spendable_coins = sum(coin.amount for coin in valid_spendable_coins)

    if len(valid_spendable_coins) == 0 or sum_spendable_coins < target:
        log.debug(f"Can't select {target} from {len(valid_spendable_coins)} coins worth {sum_spendable_coins}")
        raise NoUnspentCoins(target=target, available=sum_spendable_coins)

    log.debug(f"About to select coins for amount {target}")

    # check for exact 1 to 1 coin match.
    exact_match_coin = check_for_exact_match(valid_spendable_coins, target)
    if exact_match_coin is not None:
        log.debug(f"selected coin with an exact match: {exact_match_coin.name().hex()}")
        return [exact_match_coin]

    # Check for an exact match with all of the coins smaller than the amount.
    smaller_coins = [coin for coin in valid_spendable_coins if coin.amount < target]
    if target != 0 and sum(coin.amount for coin in smaller_coins) == target:
        log.debug(f"Selected all {len(smaller_coins)} smaller coins because they equate to an exact match")
        return smaller_coins

    smallest_coin = select_smallest_coin_over_target(target, valid_spendable_coins)
    if smallest_coin is not None:
        log.debug(f"Selected closest greater coin: {smallest_coin.name().hex()}")
        return [smallest_coin]

    largest_coins = sum_largest_coins(target, valid_spendable_coins)
    # sum_spendable_coins >= target, so adding up everything reaches it
    assert largest_coins is not None
    log.debug(f"Selected {len(largest_coins)} largest coins")
    return largest_coins


# These algorithms were based off of the algorithms in:
# https://murch.one/wp-content/uploads/2016/11/erhardt2016coinselection.pdf


# Coins must be sorted with sort_coins.
def check_for_exact_match(sorted_coins: List[Coin], target: int) -> Optional[Coin]:
    for coin in sorted_coins:
        if coin.amount == target:
            return coin
    return None


# Coins must be sorted with sort_coins. Among several coins of the smallest sufficient amount,
# the one with the lowest coin id wins.
def select_smallest_coin_over_target(target: int, sorted_coins: List[Coin]) -> Optional[Coin]:
    if len(sorted_coins) == 0 or sorted_coins[0].amount < target:
        return None
    best: Optional[Coin] = None
    for coin in sorted_coins:
        if coin.amount < target:
            break
        if best is None or coin.amount < best.amount:
            best = coin
    return best


# Adds up the largest coins in the list, resulting in the minimum number of selected coins. A solution
# is guaranteed if and only if the sum(coins) >= target. Coins must be sorted with sort_coins.
def sum_largest_coins(target: int, sorted_coins: List[Coin]) -> Optional[List[Coin]]:
    total_value = 0
    selected_coins: List[Coin] = []
    for coin in sorted_coins:
        total_value += coin.amount
        selected_coins.append(coin)
        if total_value >= target:
            return selected_coins
    return None
