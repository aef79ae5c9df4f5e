from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any, Optional, Tuple

from chia_rs import MEMPOOL_MODE, run_chia_program, tree_hash
from chia_rs.sized_bytes import bytes32
from clvm.casts import int_from_bytes
from clvm.CLVMObject import CLVMStorage
from clvm.EvalError import EvalError
from clvm.serialize import sexp_from_stream, sexp_to_stream
from clvm.SExp import SExp
from typing_extensions import Self

from dig_wallet.types.blockchain_format.serialized_program import SerializedProgram
from dig_wallet.util.byte_types import hexstr_to_bytes

INFINITE_COST = 11000000000

DEFAULT_FLAGS = MEMPOOL_MODE


class Program(SExp):
    """
    A thin wrapper around s-expression data intended to be invoked with "eval".
    """

    @classmethod
    def parse(cls, f: io.BytesIO) -> Self:
        return sexp_from_stream(f, cls.to)

    def stream(self, f: io.BytesIO) -> None:
        sexp_to_stream(self, f)

    @classmethod
    def from_serialized(cls, prg: SerializedProgram) -> Self:
        """
        Convert the SerializedProgram to a Program object.
        """
        return cls.from_bytes(bytes(prg))

    def to_serialized(self) -> SerializedProgram:
        return SerializedProgram.from_bytes(bytes(self))

    @classmethod
    def from_bytes(cls, blob: bytes) -> Self:
        # this runs the program "1", which just returns the first argument.
        # the first argument is the buffer we want to parse. This effectively
        # leverages the rust parser and LazyNode, making it a lot faster to
        # parse serialized programs into a python compatible structure
        _cost, ret = run_chia_program(
            b"\x01",
            blob,
            50,
            0,
        )
        return cls.to(ret)

    @classmethod
    def fromhex(cls, hexstr: str) -> Self:
        return cls.from_bytes(hexstr_to_bytes(hexstr))

    def __bytes__(self) -> bytes:
        f = io.BytesIO()
        self.stream(f)
        return f.getvalue()

    def __str__(self) -> str:
        return bytes(self).hex()

    def at(self, position: str) -> Program:
        """
        Take a string of only `f` and `r` characters and follow the corresponding path.

        Example:

        `assert Program.to(17) == Program.to([10, 20, 30, [15, 17], 40, 50]).at("rrrfrf")`

        """
        v = self
        for c in position.lower():
            if c == "f":
                v = v.first()
            elif c == "r":
                v = v.rest()
            else:
                raise ValueError(f"`at` got illegal character `{c}`. Only `f` & `r` allowed")
        return v

    def get_tree_hash(self) -> bytes32:
        return bytes32(tree_hash(bytes(self)))

    def run_with_cost(self, max_cost: int, args: Any, flags: int = DEFAULT_FLAGS) -> Tuple[int, Program]:
        prog_args = Program.to(args)
        cost, r = run_chia_program(self.as_bin(), prog_args.as_bin(), max_cost, flags)
        return cost, Program.to(r)

    def run(self, args: Any, max_cost: int = INFINITE_COST, flags: int = DEFAULT_FLAGS) -> Program:
        _cost, r = self.run_with_cost(max_cost, args, flags)
        return r

    # Each arg is prepended as fixed_args = (c (q . arg) fixed_args), and the result
    # is applied as (a (q . self) fixed_args)
    def curry(self, *args: Any) -> Program:
        fixed_args: Any = 1
        for arg in reversed(args):
            fixed_args = [4, (1, arg), fixed_args]
        return Program.to([2, (1, self), fixed_args])

    def uncurry(self) -> Tuple[Program, Program]:
        """
        Returns (mod, args) for a curried program, or (self, nil) when `self` is not curried.
        """

        def match(o: CLVMStorage, expected: bytes) -> None:
            if o.atom != expected:
                raise ValueError(f"expected: {expected.hex()}")

        try:
            # (2 (1 . <mod>) <args>)
            ev, quoted_inner, args_list = self.as_iter()
            match(ev, b"\x02")
            if TYPE_CHECKING:
                assert quoted_inner.pair is not None
            match(quoted_inner.pair[0], b"\x01")
            mod = quoted_inner.pair[1]
            args = []
            while args_list.pair is not None:
                # (4 (1 . <arg>) <rest>)
                cons, quoted_arg, rest = args_list.as_iter()
                match(cons, b"\x04")
                if TYPE_CHECKING:
                    assert quoted_arg.pair is not None
                match(quoted_arg.pair[0], b"\x01")
                args.append(quoted_arg.pair[1])
                args_list = rest
            match(args_list, b"\x01")
            return Program.to(mod), Program.to(args)
        except (ValueError, TypeError, EvalError):
            # too many values to unpack, a failed match, a non-pair where a pair was expected
            return self, self.to(0)

    def as_int(self) -> int:
        return int_from_bytes(self.as_atom())

    def as_atom(self) -> bytes:
        ret: Optional[bytes] = self.atom
        if ret is None:
            raise ValueError("expected atom")
        return ret

    EvalError = EvalError


NIL = Program.from_bytes(b"\x80")
