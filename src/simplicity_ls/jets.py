"""Catalog of Simplicity jets available under the ``jet::`` namespace."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

JET_NAMESPACE = "jet"


@dataclass(frozen=True)
class Jet:
    name: str
    source: Tuple[str, ...]
    target: str
    doc: str = ""

    def declaration(self) -> str:
        return f"fn {JET_NAMESPACE}::{self.name}({', '.join(self.source)}) -> {self.target}"


def _int(width: int) -> str:
    return "bool" if width == 1 else f"u{width}"


def _arithmetic_family(widths: Tuple[int, ...]) -> List[Jet]:
    jets: list[Jet] = []
    for width in widths:
        ty = _int(width)
        pair = (ty, ty)
        jets.extend(
            [
                Jet(f"add_{width}", pair, f"(bool, {ty})", f"Add two {width}-bit integers and return the carry."),
                Jet(
                    f"subtract_{width}",
                    pair,
                    f"(bool, {ty})",
                    f"Subtract two {width}-bit integers and return the borrow.",
                ),
                Jet(
                    f"multiply_{width}",
                    pair,
                    _int(width * 2),
                    f"Multiply two {width}-bit integers. The result is {width * 2} bits wide.",
                ),
                Jet(f"increment_{width}", (ty,), f"(bool, {ty})", f"Increment a {width}-bit integer and return the carry."),
                Jet(f"decrement_{width}", (ty,), f"(bool, {ty})", f"Decrement a {width}-bit integer and return the borrow."),
                Jet(f"lt_{width}", pair, "bool", "Check if the first integer is less than the second."),
                Jet(f"le_{width}", pair, "bool", "Check if the first integer is less than or equal to the second."),
                Jet(f"min_{width}", pair, ty, "Return the smaller of two integers."),
                Jet(f"max_{width}", pair, ty, "Return the larger of two integers."),
                Jet(f"is_zero_{width}", (ty,), "bool", f"Check if a {width}-bit integer is zero."),
                Jet(f"is_one_{width}", (ty,), "bool", f"Check if a {width}-bit integer is one."),
            ]
        )
    return jets


def _bitwise_family(widths: Tuple[int, ...]) -> List[Jet]:
    jets: list[Jet] = []
    for width in widths:
        ty = _int(width)
        pair = (ty, ty)
        jets.extend(
            [
                Jet(f"complement_{width}", (ty,), ty, "Bitwise NOT of an integer."),
                Jet(f"and_{width}", pair, ty, "Bitwise AND of two integers."),
                Jet(f"or_{width}", pair, ty, "Bitwise OR of two integers."),
                Jet(f"xor_{width}", pair, ty, "Bitwise XOR of two integers."),
            ]
        )
    return jets


def _equality_family(widths: Tuple[int, ...]) -> List[Jet]:
    return [
        Jet(f"eq_{width}", (_int(width), _int(width)), "bool", f"Check if two {width}-bit values are equal.")
        for width in widths
    ]


_SINGLE_JETS = [
    Jet("verify", ("bool",), "()", "Assert that a bit is true. Fails the program otherwise."),
    Jet("sha_256_ctx_8_init", (), "Ctx8", "Initialize a default SHA-256 hash engine."),
    Jet("sha_256_ctx_8_add_1", ("Ctx8", "u8"), "Ctx8", "Add 1 byte to a SHA-256 hash engine."),
    Jet("sha_256_ctx_8_add_4", ("Ctx8", "u32"), "Ctx8", "Add 4 bytes to a SHA-256 hash engine."),
    Jet("sha_256_ctx_8_add_32", ("Ctx8", "u256"), "Ctx8", "Add 32 bytes to a SHA-256 hash engine."),
    Jet("sha_256_ctx_8_finalize", ("Ctx8",), "u256", "Finalize a SHA-256 hash engine and return the digest."),
    Jet(
        "bip_0340_verify",
        ("(Pubkey, Message)", "Signature"),
        "()",
        "Assert that a Schnorr signature matches a public key and message.\n\n"
        "Fails the program if the signature is invalid.",
    ),
    Jet("sig_all_hash", (), "u256", "Return the SIGHASH_ALL hash of the current transaction."),
    Jet("current_index", (), "u32", "Return the index of the current input."),
    Jet("num_inputs", (), "u32", "Return the number of inputs of the transaction."),
    Jet("num_outputs", (), "u32", "Return the number of outputs of the transaction."),
    Jet("version", (), "u32", "Return the version number of the transaction."),
    Jet("lock_time", (), "Lock", "Return the lock time of the transaction."),
    Jet("tx_is_final", (), "bool", "Check if every input sequence number is final."),
    Jet("check_lock_height", ("Height",), "()", "Assert that the transaction lock height is at least the given height."),
    Jet("check_lock_time", ("Time",), "()", "Assert that the transaction lock time is at least the given time."),
    Jet(
        "check_lock_distance",
        ("Distance",),
        "()",
        "Assert that the relative lock distance of the current input is at least the given distance.",
    ),
    Jet(
        "check_lock_duration",
        ("Duration",),
        "()",
        "Assert that the relative lock duration of the current input is at least the given duration.",
    ),
    Jet("internal_key", (), "Pubkey", "Return the internal key of the current input's taproot output."),
    Jet("current_script_hash", (), "u256", "Return the SHA-256 hash of the script pubkey of the current input."),
    Jet(
        "input_script_hash",
        ("u32",),
        "Option<u256>",
        "Return the SHA-256 hash of the script pubkey of the input at the given index, if it exists.",
    ),
    Jet(
        "output_script_hash",
        ("u32",),
        "Option<u256>",
        "Return the SHA-256 hash of the script pubkey of the output at the given index, if it exists.",
    ),
    Jet("genesis_block_hash", (), "u256", "Return the hash of the genesis block of the chain."),
]


@lru_cache(maxsize=1)
def _jet_index() -> Dict[str, Jet]:
    jets = (
        _arithmetic_family((8, 16, 32, 64))
        + _bitwise_family((1, 8, 16, 32, 64))
        + _equality_family((1, 8, 16, 32, 64, 256))
        + _SINGLE_JETS
    )
    return {jet.name: jet for jet in jets}


def all_jets() -> List[Jet]:
    return list(_jet_index().values())


def get_jet(name: str) -> Optional[Jet]:
    return _jet_index().get(name)
