from __future__ import annotations

from pathlib import Path


class WalletError(Exception):
    pass


##
#  Seed phrase lifecycle errors
##


class MnemonicRequired(WalletError):
    def __init__(self) -> None:
        super().__init__("Mnemonic seed phrase is required")


class InvalidMnemonic(WalletError):
    def __init__(self, reason: str = "") -> None:
        message = "Provided mnemonic is invalid"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.reason = reason


class MnemonicNotLoaded(WalletError):
    def __init__(self) -> None:
        super().__init__("Mnemonic seed phrase is not loaded")


class WalletNotFound(WalletError):
    def __init__(self, wallet_name: str) -> None:
        super().__init__(f"Wallet not found: {wallet_name}")
        self.wallet_name = wallet_name


##
#  Coin selection and chain data errors
##


class NoUnspentCoins(WalletError):
    def __init__(self, target: int = 0, available: int = 0) -> None:
        super().__init__(f"No unspent coins available (needed {target}, found {available})")
        self.target = target
        self.available = available


class NetworkError(WalletError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Network error: {message}")


class CoinSetError(WalletError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Coin set error: {message}")


##
#  Storage and crypto errors
##


class CryptoError(WalletError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Cryptographic error: {message}")


class FileSystemError(WalletError):
    def __init__(self, message: str, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message}: {str(path)!r}"
        super().__init__(f"File system error: {message}")
        self.path = path


class LockTimeout(FileSystemError):
    pass


KeyringLockTimeout = LockTimeout


class SerializationError(WalletError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Serialization error: {message}")
