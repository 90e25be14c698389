from typing import Protocol, Any


BIGNUM_EXT_CODE = 2
"""
Extension code carrying a canonical unsigned big integer (Balance).
"""


class BigNum(int):
    """
    Marker for integers that must travel as canonical big integers rather
    than as native wire integers.
    """


class WireFormat(Protocol):
    """
    Defines the self-describing binary format typed values are lowered to.

    A wire tree is built from None, bool, int, float, str, bytes, BigNum,
    lists/tuples and dicts. Implementations must be:
    - deterministic (dict insertion order is preserved)
    - pure (no side effects)
    - safe against malformed input: any undecodable input raises
      MalformedWireValue
    """

    def pack(self, tree: Any) -> bytes:
        """Encode a wire tree into bytes."""

    def unpack(self, data: bytes) -> Any:
        """
        Decode bytes into a wire tree. Arrays come back as tuples, bin as
        bytes, str as str and canonical big integers as BigNum.
        """
