"""
Portable seeded pseudo-randomness.

Seed strings are hashed with FNV-1a (32-bit) and fed to mulberry32, so the same
seed walks candidate lists identically on every platform and interpreter.
"""

import re


MASK_32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
MULBERRY_INCREMENT = 0x6D2B79F5

SEED_SUFFIX_RE = re.compile(r"#(\d+)$")


def fnv1a_32(text):
    """FNV-1a 32-bit hash over the UTF-8 bytes of `text`."""
    value = FNV_OFFSET_BASIS
    for byte in str(text).encode("utf-8"):
        value ^= byte
        value = (value * FNV_PRIME) & MASK_32
    return value


def _imul(a, b):
    return (a * b) & MASK_32


class SeededRandom:
    """mulberry32 generator; `next()` returns floats in [0, 1)."""

    def __init__(self, seed):
        if isinstance(seed, int):
            self.state = seed & MASK_32
        else:
            self.state = fnv1a_32(seed)

    @classmethod
    def for_slot(cls, seed, block_index, slot_index):
        """Independent stream for one selection slot of one block."""
        return cls(f"{seed}|{block_index}|{slot_index}")

    def next_uint32(self):
        self.state = (self.state + MULBERRY_INCREMENT) & MASK_32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t = (t ^ ((t + _imul(t ^ (t >> 7), t | 61)) & MASK_32)) & MASK_32
        return (t ^ (t >> 14)) & MASK_32

    def next(self):
        return self.next_uint32() / 4294967296.0

    def randint(self, n):
        """Index in [0, n)."""
        if n <= 0:
            raise ValueError("randint needs a positive bound")
        return min(n - 1, int(self.next() * n))

    def choice(self, items):
        items = list(items)
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[self.randint(len(items))]


def make_seed(user=None, day=None, focus=None, nonce=None):
    """Composite seed key: the non-empty parts joined with '-'."""
    parts = [str(part).strip() for part in (user, day, focus, nonce) if part is not None]
    return "-".join(part for part in parts if part)


def next_seed(seed):
    """Bump the trailing '#n' disambiguator ('abc' -> 'abc#1' -> 'abc#2')."""
    seed = str(seed or "")
    match = SEED_SUFFIX_RE.search(seed)
    if not match:
        return f"{seed}#1"
    return f"{seed[:match.start()]}#{int(match.group(1)) + 1}"
