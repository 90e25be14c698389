import msgpack
from typing import Any

from idlwire.core.errors import MalformedWireValue
from idlwire.core.ports.wire import BIGNUM_EXT_CODE, BigNum, WireFormat


class MsgPackWire(WireFormat):
    """
    MsgPack-based implementation of the WireFormat interface.

    - str and bytes stay distinct (bin type)
    - dict entries are written in insertion order
    - BigNum values travel as ext type 2 holding the minimal big-endian
      magnitude; zero is the empty payload
    - a map that repeats a key is malformed
    """
    def __init__(self, max_message_size: int = 1 * 1024 * 1024, max_depth: int = 256) -> None:
        self._max_message_size = max_message_size
        self._max_depth = max_depth

    def pack(self, tree: Any) -> bytes:
        return msgpack.packb(tree, use_bin_type=True, default=self._default, strict_types=True)

    def unpack(self, data: bytes) -> Any:
        if len(data) > self._max_message_size:
            raise MalformedWireValue(
                f"Message of {len(data)} bytes exceeds limit of {self._max_message_size}"
            )

        try:
            tree = msgpack.unpackb(
                data,
                raw=False,
                use_list=False,
                strict_map_key=False,
                ext_hook=self._ext_hook,
                object_pairs_hook=self._unique_pairs,
            )
        except MalformedWireValue:
            raise
        except (ValueError, TypeError, msgpack.UnpackException) as ex:
            raise MalformedWireValue(f"Undecodable wire bytes: {ex}") from ex

        self._check_depth(tree)
        return tree

    @staticmethod
    def _default(obj: Any) -> Any:
        if isinstance(obj, BigNum):
            magnitude = int(obj).to_bytes((obj.bit_length() + 7) // 8, "big")
            return msgpack.ExtType(BIGNUM_EXT_CODE, magnitude)
        if isinstance(obj, bool):
            return obj
        if isinstance(obj, int):
            return int(obj)
        if isinstance(obj, float):
            return float(obj)
        if isinstance(obj, str):
            return str(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return bytes(obj)
        if isinstance(obj, (list, tuple)):
            return list(obj)
        if isinstance(obj, dict):
            return dict(obj)
        raise TypeError(f"Cannot pack object of type {type(obj).__name__}")

    @staticmethod
    def _unique_pairs(pairs: Any) -> dict:
        tree = {}
        for key, value in pairs:
            if key in tree:
                raise MalformedWireValue(f"Map repeats key {key!r}")
            tree[key] = value
        return tree

    @staticmethod
    def _ext_hook(code: int, data: bytes) -> Any:
        if code != BIGNUM_EXT_CODE:
            raise MalformedWireValue(f"Unknown extension type {code}")
        if data[:1] == b"\x00":
            raise MalformedWireValue("Big integer magnitude has a leading zero byte")
        return BigNum(int.from_bytes(data, "big"))

    def _check_depth(self, tree: Any) -> None:
        stack = [(tree, 0)]
        while stack:
            node, depth = stack.pop()
            if depth > self._max_depth:
                raise MalformedWireValue(f"Wire value nests deeper than {self._max_depth}")
            if isinstance(node, tuple):
                stack.extend((child, depth + 1) for child in node)
            elif isinstance(node, dict):
                stack.extend((child, depth + 1) for child in node.values())
