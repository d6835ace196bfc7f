"""
Compiled-in Programs
====================

Bytecode constants run by the interpreter. Programs are trusted input:
they are written by hand against the instruction table in machine/isa.py.
"""

# Compute the nth fibonacci number.
# r0 is both the parameter and the result.
#
# f(0) = 1
# f(1) = 1
# f(2) = 2
# f(3) = 3
# f(4) = 5
# f(5) = 8
# ...
#
# The result is passed through a single byte of the data segment, so it is
# reported modulo 256.
FIBONACCI = (
    b"M\x03\x00"                # 00: r3 := r0
    b"I\x01\x01"                # 03: r1 := 1
    b"I\x02\x01"                # 06: r2 := 1

    # if r3 < 2 -> done
    b"I\x04\x02"                # 09: r4 := 2
    b"M\x05\x03"                # 0c: r5 := r3
    b"U\x05\x04"                # 0f: r5 := r5 - r4
    b"BL\x1b\x00\x00\x00"       # 12: if r5 < 0 -> 33

    # loop begin
    b"I\x05\x01"                # 18: r5 := 1
    b"U\x03\x05"                # 1b: r3 := r3 - r5
    b"M\x04\x02"                # 1e: r4 := r2
    b"A\x02\x01"                # 21: r2 := r2 + r1
    b"M\x01\x04"                # 24: r1 := r4
    b"M\x06\x03"                # 27: r6 := r3
    b"U\x06\x05"                # 2a: r6 := r6 - r5
    b"BN\xe5\xff\xff\xff"       # 2d: if r6 != 0 -> 18
    # loop end (+0x1b bytes)

    b"I\x00\x00"                # 33: r0 := 0
    b"S\x00\x02"                # 36: *r0 := r2
    b"L\x00\x00"                # 39: r0 := *r0
    b"H"                        # 3c: halt
)


def fibonacci_reference(n: int) -> int:
    """What FIBONACCI leaves in r0 for input n."""
    a, b = 1, 1
    for _ in range(n - 1):
        a, b = b, a + b
    return b & 0xFF
