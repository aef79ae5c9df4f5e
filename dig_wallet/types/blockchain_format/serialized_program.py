from __future__ import annotations

import chia_rs

SerializedProgram = chia_rs.Program
