from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class Address(bytes):
    """
    A 160-bit account identifier.

    Addresses travel as exactly 20 raw bytes and are never interpreted as
    numbers, so they carry no byte order.
    """
    SIZE: int = 20

    def __new__(cls, value: bytes | bytearray | memoryview = b"\x00" * 20) -> Address:
        raw = bytes(value)
        if len(raw) != cls.SIZE:
            raise ValueError(f"Address must be {cls.SIZE} bytes, got {len(raw)}")
        return super().__new__(cls, raw)

    @classmethod
    def from_hex(cls, text: str) -> Address:
        if text.startswith(("0x", "0X")):
            text = text[2:]
        return cls(bytes.fromhex(text))

    def __repr__(self) -> str:
        return f"Address(0x{self.hex()})"

    def __str__(self) -> str:
        return f"0x{self.hex()}"


class Balance(int):
    """
    An unsigned integer of unbounded precision.
    """

    def __new__(cls, value: int = 0) -> Balance:
        if isinstance(value, bool):
            raise TypeError("Balance cannot be built from a bool")
        number = super().__new__(cls, value)
        if number < 0:
            raise ValueError(f"Balance must be non-negative, got {value}")
        return number

    def to_magnitude(self) -> bytes:
        """
        Minimal big-endian magnitude. Zero is the empty string, no other
        value starts with a zero byte.
        """
        return int(self).to_bytes((self.bit_length() + 7) // 8, "big")

    @classmethod
    def from_magnitude(cls, data: bytes) -> Balance:
        if data[:1] == b"\x00":
            raise ValueError("Balance magnitude has a leading zero byte")
        return cls(int.from_bytes(data, "big"))

    def __repr__(self) -> str:
        return f"Balance({int(self)})"


@dataclass(frozen=True, slots=True)
class Ok:
    """Success branch of a Result value."""
    value: Any


@dataclass(frozen=True, slots=True)
class Err:
    """Error branch of a Result value."""
    error: Any
