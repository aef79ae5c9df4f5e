from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Collection, Dict, List, Optional, Tuple, TypeVar

from chia_rs import Coin, CoinState, G1Element, PrivateKey
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32

from dig_wallet.protocols.wallet_protocol import RespondCoinState, RespondPuzzleSolution, WalletPeer
from dig_wallet.types.blockchain_format.program import Program
from dig_wallet.util.bech32m import decode_puzzle_hash, encode_puzzle_hash
from dig_wallet.util.config import DEFAULT_CONFIG, NetworkConstants, get_network_constants, load_network_constants
from dig_wallet.util.errors import (
    CoinSetError,
    CryptoError,
    MnemonicNotLoaded,
    NetworkError,
    WalletError,
    WalletNotFound,
)
from dig_wallet.util.file_keyring import FileKeyring
from dig_wallet.util.keychain import (
    bytes_from_mnemonic,
    generate_mnemonic,
    normalize_mnemonic,
    seed_phrase_to_master_key,
)
from dig_wallet.wallet.cat_wallet.cat_utils import cat_puzzle_hash, parse_cat_lineage
from dig_wallet.wallet.coin_selection import select_coins, sort_coins
from dig_wallet.wallet.derive_keys import (
    master_key_to_fingerprint,
    master_key_to_synthetic_key_pair,
    synthetic_public_key_to_puzzle_hash,
)
from dig_wallet.wallet.key_ownership import sign_key_ownership, verify_key_ownership
from dig_wallet.wallet.lineage_proof import LineageProof
from dig_wallet.wallet.reserved_coins import ReservedCoinCache

log = logging.getLogger(__name__)

DIG_ASSET_ID = bytes32.fromhex("a406d3a9de984d03c9591c10d917593b434d5263cabe2b42f6b367df16832f81")
DEFAULT_WALLET_NAME = "default"

MAINNET_CONSTANTS = get_network_constants(DEFAULT_CONFIG, "mainnet")

T = TypeVar("T")


async def _run_blocking(func: Callable[..., T], *args: Any) -> T:
    return await asyncio.get_running_loop().run_in_executor(None, functools.partial(func, *args))


def parse_puzzle_and_solution(puzzle: bytes, solution: bytes) -> Tuple[Program, Program]:
    try:
        return Program.from_bytes(puzzle), Program.from_bytes(solution)
    except ValueError as e:
        raise CoinSetError(f"Failed to parse puzzle and solution: {e}") from e


async def _keyring_or_default(keyring: Optional[FileKeyring], root_path: Optional[Path] = None) -> FileKeyring:
    if keyring is not None:
        return keyring
    return await _run_blocking(FileKeyring.create, root_path)


@dataclass
class Wallet:
    """
    A named seed phrase and the keys derived from it. Keys are recomputed from the phrase on demand
    and never written anywhere.
    """

    wallet_name: str
    mnemonic: Optional[str]
    keyring: FileKeyring = field(default_factory=FileKeyring.create, repr=False)
    constants: NetworkConstants = field(default_factory=load_network_constants)
    reserved_coins: Optional[ReservedCoinCache] = field(default=None, repr=False)

    @classmethod
    async def load(
        cls,
        wallet_name: str = DEFAULT_WALLET_NAME,
        create_on_undefined: bool = True,
        keyring: Optional[FileKeyring] = None,
        constants: Optional[NetworkConstants] = None,
        reserved_coins: Optional[ReservedCoinCache] = None,
        root_path: Optional[Path] = None,
    ) -> Wallet:
        """
        Without an explicit keyring or constants, both come from the config under `root_path`
        (DIG_ROOT or ~/.dig by default), the same way the command line builds them.
        """
        keyring = await _keyring_or_default(keyring, root_path)
        if constants is None:
            constants = await _run_blocking(load_network_constants, root_path)
        mnemonic = await _run_blocking(keyring.get, wallet_name)
        if mnemonic is not None:
            return cls(wallet_name, mnemonic, keyring, constants, reserved_coins)

        if not create_on_undefined:
            raise WalletNotFound(wallet_name)

        log.info(f"Wallet {wallet_name!r} not found, creating a new one")
        mnemonic = await cls.create_new_wallet(wallet_name, keyring)
        return cls(wallet_name, mnemonic, keyring, constants, reserved_coins)

    @staticmethod
    async def create_new_wallet(wallet_name: str, keyring: Optional[FileKeyring] = None) -> str:
        keyring = await _keyring_or_default(keyring)
        mnemonic = generate_mnemonic()
        await _run_blocking(keyring.put, wallet_name, mnemonic)
        return mnemonic

    @staticmethod
    async def import_wallet(wallet_name: str, seed: Optional[str], keyring: Optional[FileKeyring] = None) -> str:
        mnemonic = normalize_mnemonic(seed)
        bytes_from_mnemonic(mnemonic)
        keyring = await _keyring_or_default(keyring)
        await _run_blocking(keyring.put, wallet_name, mnemonic)
        return mnemonic

    @staticmethod
    async def delete_wallet(wallet_name: str, keyring: Optional[FileKeyring] = None) -> bool:
        keyring = await _keyring_or_default(keyring)
        return await _run_blocking(keyring.remove, wallet_name)

    @staticmethod
    async def list_wallets(keyring: Optional[FileKeyring] = None) -> List[str]:
        keyring = await _keyring_or_default(keyring)
        names = await _run_blocking(keyring.list_names)
        return sorted(names)

    def get_mnemonic(self) -> str:
        if self.mnemonic is None:
            raise MnemonicNotLoaded()
        return self.mnemonic

    def get_master_secret_key(self) -> PrivateKey:
        return seed_phrase_to_master_key(self.get_mnemonic())

    def get_private_synthetic_key(self) -> PrivateKey:
        synthetic_sk, _ = master_key_to_synthetic_key_pair(self.get_master_secret_key())
        return synthetic_sk

    def get_public_synthetic_key(self) -> G1Element:
        _, synthetic_pk = master_key_to_synthetic_key_pair(self.get_master_secret_key())
        return synthetic_pk

    def get_owner_puzzle_hash(self) -> bytes32:
        return synthetic_public_key_to_puzzle_hash(self.get_public_synthetic_key())

    def get_owner_public_key(self) -> str:
        """
        The receive address of this wallet on its network.
        """
        return self.puzzle_hash_to_address(self.get_owner_puzzle_hash(), self.constants.address_prefix)

    def get_fingerprint(self) -> uint32:
        return master_key_to_fingerprint(self.get_master_secret_key())

    def create_key_ownership_signature(self, nonce: str) -> str:
        return sign_key_ownership(nonce, self.get_private_synthetic_key())

    @staticmethod
    def verify_key_ownership_signature(nonce: str, signature: str, public_key: str) -> bool:
        return verify_key_ownership(nonce, signature, public_key)

    @staticmethod
    def address_to_puzzle_hash(address: str) -> bytes32:
        try:
            return decode_puzzle_hash(address)
        except ValueError as e:
            raise CryptoError(f"Failed to decode address {address!r}: {e}") from e

    @staticmethod
    def puzzle_hash_to_address(puzzle_hash: bytes32, prefix: str = "xch") -> str:
        try:
            return encode_puzzle_hash(puzzle_hash, prefix)
        except ValueError as e:
            raise CryptoError(f"Failed to encode puzzle hash: {e}") from e

    ##
    #  Coin queries
    ##

    async def _get_unspent_coin_states(self, peer: WalletPeer, puzzle_hash: bytes32) -> List[CoinState]:
        try:
            # start from genesis, nothing is remembered between scans
            coin_states = await peer.get_all_unspent_coins(puzzle_hash, None, self.constants.genesis_challenge)
        except Exception as e:
            raise NetworkError(f"Failed to get unspent coins: {e}") from e
        # one state per coin id, in the order the peer first reported them
        unique_states: Dict[bytes32, CoinState] = {}
        for coin_state in coin_states:
            unique_states.setdefault(coin_state.coin.name(), coin_state)
        return list(unique_states.values())

    async def get_all_unspent_xch_coins(self, peer: WalletPeer, omit_coins: Collection[Coin] = ()) -> List[Coin]:
        coin_states = await self._get_unspent_coin_states(peer, self.get_owner_puzzle_hash())
        omit_coin_ids = {coin.name() for coin in omit_coins}
        return sort_coins([cs.coin for cs in coin_states if cs.coin.name() not in omit_coin_ids])

    async def _select_and_reserve(self, available_coins: List[Coin], target: int) -> List[Coin]:
        if self.reserved_coins is None:
            return select_coins(available_coins, target)
        reserved_coin_ids = await _run_blocking(self.reserved_coins.reserved_coin_ids)
        selected_coins = select_coins(available_coins, target, reserved_coin_ids)
        await _run_blocking(self.reserved_coins.reserve, selected_coins)
        return selected_coins

    async def select_unspent_coins(
        self, peer: WalletPeer, coin_amount: int, fee: int, omit_coins: Collection[Coin] = ()
    ) -> List[Coin]:
        available_coins = await self.get_all_unspent_xch_coins(peer, omit_coins)
        return await self._select_and_reserve(available_coins, coin_amount + fee)

    async def get_xch_balance(self, peer: WalletPeer) -> int:
        return sum(coin.amount for coin in await self.get_all_unspent_xch_coins(peer))

    async def prove_cat_lineage(self, peer: WalletPeer, coin_state: CoinState, asset_id: bytes32) -> LineageProof:
        """
        Fetches the parent of a CAT coin and replays its spend. Raises NetworkError when the peer
        can't be reached and CoinSetError when the data it returns does not prove the coin.
        """
        coin = coin_state.coin
        if coin_state.created_height is None:
            raise CoinSetError("Cannot determine coin creation height")

        try:
            parent_state = await peer.request_coin_state(
                [coin.parent_coin_info], None, self.constants.genesis_challenge, False
            )
        except Exception as e:
            raise NetworkError(f"Failed to get coin state: {e}") from e
        if not isinstance(parent_state, RespondCoinState) or len(parent_state.coin_states) == 0:
            raise CoinSetError(f"Coin state rejected: {parent_state}")
        parent_coin = parent_state.coin_states[0].coin

        try:
            solution_response = await peer.request_puzzle_and_solution(
                coin.parent_coin_info, uint32(coin_state.created_height)
            )
        except Exception as e:
            raise NetworkError(f"Failed to get puzzle and solution: {e}") from e
        if not isinstance(solution_response, RespondPuzzleSolution):
            raise CoinSetError(f"Parent puzzle solution rejected: {solution_response}")

        parent_puzzle, parent_solution = parse_puzzle_and_solution(
            bytes(solution_response.response.puzzle), bytes(solution_response.response.solution)
        )

        return parse_cat_lineage(coin, parent_coin, parent_puzzle, parent_solution, asset_id)

    async def get_all_unspent_cat_coins(
        self,
        peer: WalletPeer,
        asset_id: bytes32 = DIG_ASSET_ID,
        omit_coins: Collection[Coin] = (),
        verbose: bool = False,
    ) -> List[Coin]:
        """
        Unspent CAT coins of `asset_id` at this wallet's puzzle hash whose lineage checks out.
        A coin whose lineage can't be proven is left out and the scan goes on.
        """
        puzzle_hash = cat_puzzle_hash(asset_id, self.get_owner_puzzle_hash())
        coin_states = await self._get_unspent_coin_states(peer, puzzle_hash)
        omit_coin_ids = {coin.name() for coin in omit_coins}

        proved_coins: List[Coin] = []
        for coin_state in coin_states:
            coin_id = coin_state.coin.name()
            if coin_id in omit_coin_ids:
                continue
            try:
                await self.prove_cat_lineage(peer, coin_state, asset_id)
            except WalletError as e:
                log.log(logging.WARNING if verbose else logging.DEBUG, f"Dropping coin_id {coin_id.hex()} | {e}")
                continue
            proved_coins.append(coin_state.coin)

        return sort_coins(proved_coins)

    async def select_unspent_cat_coins(
        self,
        peer: WalletPeer,
        coin_amount: int,
        fee: int,
        asset_id: bytes32 = DIG_ASSET_ID,
        omit_coins: Collection[Coin] = (),
        verbose: bool = False,
    ) -> List[Coin]:
        available_coins = await self.get_all_unspent_cat_coins(peer, asset_id, omit_coins, verbose)
        return await self._select_and_reserve(available_coins, coin_amount + fee)

    async def get_cat_balance(self, peer: WalletPeer, asset_id: bytes32 = DIG_ASSET_ID, verbose: bool = False) -> int:
        return sum(coin.amount for coin in await self.get_all_unspent_cat_coins(peer, asset_id, (), verbose))

    async def get_all_unspent_dig_coins(
        self, peer: WalletPeer, omit_coins: Collection[Coin] = (), verbose: bool = False
    ) -> List[Coin]:
        return await self.get_all_unspent_cat_coins(peer, DIG_ASSET_ID, omit_coins, verbose)

    async def select_unspent_dig_token_coins(
        self,
        peer: WalletPeer,
        coin_amount: int,
        fee: int,
        omit_coins: Collection[Coin] = (),
        verbose: bool = False,
    ) -> List[Coin]:
        return await self.select_unspent_cat_coins(peer, coin_amount, fee, DIG_ASSET_ID, omit_coins, verbose)

    async def get_dig_balance(self, peer: WalletPeer, verbose: bool = False) -> int:
        return await self.get_cat_balance(peer, DIG_ASSET_ID, verbose)

    @staticmethod
    async def is_coin_spendable(
        peer: WalletPeer, coin_id: bytes32, constants: NetworkConstants = MAINNET_CONSTANTS
    ) -> bool:
        try:
            is_spent = await peer.is_coin_spent(coin_id, None, constants.genesis_challenge)
        except Exception as e:
            raise NetworkError(f"Failed to check coin status: {e}") from e
        return not is_spent

    async def coin_is_spendable(self, peer: WalletPeer, coin_id: bytes32) -> bool:
        return await self.is_coin_spendable(peer, coin_id, self.constants)
