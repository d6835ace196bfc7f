"""
Bytecode Encoding Helpers for Tests
===================================

Tiny encoders so tests can spell out programs instruction by
instruction instead of as raw byte strings.
"""


def rr(tag: str, rx: int, ry: int) -> bytes:
    """Register-register instruction (S, L, A, U, M)."""
    return bytes([ord(tag), rx, ry])


def store(rptr: int, rval: int) -> bytes:
    return rr("S", rptr, rval)


def load(rptr: int, rdst: int) -> bytes:
    return rr("L", rptr, rdst)


def add(rdst: int, rsrc: int) -> bytes:
    return rr("A", rdst, rsrc)


def sub(rdst: int, rsrc: int) -> bytes:
    return rr("U", rdst, rsrc)


def movr(rdst: int, rsrc: int) -> bytes:
    return rr("M", rdst, rsrc)


def movi(rdst: int, imm: int) -> bytes:
    return bytes([ord("I"), rdst, imm])


def branch(cc: str, displacement: int) -> bytes:
    """Branch; displacement is measured from the end of the instruction."""
    return b"B" + cc.encode("ascii") + displacement.to_bytes(4, "little", signed=True)


HALT = b"H"


def blt_probe() -> bytes:
    """
    r0 := 1 if r1 < r2 (by U then BL), else 0.

        00: U r1, r2
        03: I r0, 0
        06: BL +1      -> 0d
        0c: H
        0d: I r0, 1
        10: H
    """
    return sub(1, 2) + movi(0, 0) + branch("L", 1) + HALT + movi(0, 1) + HALT
