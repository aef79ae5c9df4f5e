from __future__ import annotations

import os
import sys

from setuptools import find_packages, setup

dependencies = [
    "anyio>=4.2.0",
    "bitstring>=4.1.4",  # Binary data management library
    "chia_rs>=0.16.0",  # BLS signatures, Coin, CoinState and the rust CLVM runner
    "chia_puzzles_py>=0.20.1",  # Compiled standard puzzles (p2_delegated_puzzle_or_hidden_puzzle, CAT v2)
    "clvm>=0.9.8",
    "colorlog>=6.8.2",  # Adds color to logs
    "concurrent-log-handler>=0.9.25",  # Concurrently log and rotate logs
    "cryptography>=42.0.4",  # AES-GCM encryption of the keyring
    "filelock>=3.13.1",  # For reading and writing the keyring and config multiprocess and multithread safely
    "mnemonic>=0.20",  # BIP-39 english word list
    "PyYAML>=6.0.1",  # Used for config file format
    "click>=8.1.3",  # For the CLI
    "typing-extensions>=4.10.0",  # typing backports like Protocol and final
]

dev_dependencies = [
    "build>=1.0.3",
    "coverage>=7.4.1",
    "pytest>=8.0.2",
    "pytest-cov>=4.1.0",
    "pytest-mock>=3.12.0",
    "isort>=5.13.2",
    "flake8>=7.0.0",
    "mypy>=1.8.0",
    "black>=23.12.1",
    "types-pyyaml>=6.0.12.12",
    "types-setuptools>=69.1.0.20240217",
]

kwargs = dict(
    name="dig-wallet",
    description="Encrypted multi-wallet keyring, key ownership proofs and CAT-aware coin selection for DIG.",
    license="Apache License",
    python_requires=">=3.8.1, <4",
    keywords="dig chia wallet cat bls",
    install_requires=dependencies,
    extras_require=dict(
        dev=dev_dependencies,
    ),
    packages=find_packages(include=["dig_wallet", "dig_wallet.*"]),
    entry_points={
        "console_scripts": [
            "dig-wallet = dig_wallet.cmds.dig:main",
        ]
    },
    package_data={
        "": ["py.typed"],
    },
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    zip_safe=False,
)

if "setup_file" in sys.modules:
    # include dev deps in regular deps when run in snyk
    dependencies.extend(dev_dependencies)

if len(os.environ.get("DIG_SKIP_SETUP", "")) < 1:
    setup(**kwargs)  # type: ignore
