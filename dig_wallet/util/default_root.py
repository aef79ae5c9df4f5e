# Package: utils

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_ROOT_PATH = Path(os.path.expanduser(os.getenv("DIG_ROOT", "~/.dig"))).resolve()

KEYRING_FILENAME = "keyring.json"


def resolve_root_path(*, override: Optional[Path]) -> Path:
    candidates = [
        override,
        os.environ.get("DIG_ROOT"),
        "~/.dig",
    ]

    for candidate in candidates:
        if candidate is not None:
            return Path(candidate).expanduser().resolve()

    raise RuntimeError("unreachable: last candidate is hardcoded to be found")


def resolve_keyring_path(*, root_path: Path, override: Optional[Path] = None, filename: str = KEYRING_FILENAME) -> Path:
    """
    An explicit override wins, then DIG_KEYRING_PATH (used to isolate tests), then <root>/<filename>.
    """
    if override is not None:
        return Path(override).expanduser().resolve()
    env_path = os.environ.get("DIG_KEYRING_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return root_path / filename
