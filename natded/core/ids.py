from __future__ import annotations
import string
from typing import Sequence

DEFAULT_ALPHABET = string.ascii_lowercase
BINDER_ALPHABET = "xyzuvwabcdefghijklmnopqrst"


class IdentifierGenerator:
    """Fresh names a, b, ..., z, aa, ab, ... (bijective base-N over the alphabet)."""

    def __init__(self, alphabet: Sequence[str] = DEFAULT_ALPHABET):
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must not repeat characters")
        self.alphabet = list(alphabet)
        self.idx = 0

    def __call__(self) -> str:
        n = self.idx + 1
        base = len(self.alphabet)
        digits = []
        while n > 0:
            n, rem = divmod(n - 1, base)
            digits.append(self.alphabet[rem])
        self.idx += 1
        return "".join(reversed(digits))

    def reset(self):
        self.idx = 0


class NumberGenerator:
    def __init__(self):
        self.counter = 0

    def __call__(self) -> int:
        num = self.counter
        self.counter += 1
        return num

    def reset(self):
        self.counter = 0
