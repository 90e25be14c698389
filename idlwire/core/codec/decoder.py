import logging
import math
import struct
from typing import Any

from idlwire.core.codec.compat import compatible, observed_sequence
from idlwire.core.errors import (
    ArrayLengthMismatch,
    InvalidEnumVariant,
    MalformedWireValue,
    MissingField,
    UnknownTypeReference,
)
from idlwire.core.models.schema import EnumDef
from idlwire.core.models.types import INTEGER_RANGES, Type, TypeKind
from idlwire.core.models.values import Address, Balance, Err, Ok
from idlwire.core.ports.wire import BigNum, WireFormat
from idlwire.core.schema.registry import SchemaRegistry


class Decoder:
    """
    Maps wire bytes back to validated, typed values.

    Every failure raises a DecodeError subclass whose `path` points at the
    offending value. Decoding has no shared mutable state: a failed call
    leaves nothing behind.

    Unknown keys in struct and event maps are ignored so that newer
    writers can add fields without breaking older readers.
    """
    def __init__(self, wire: WireFormat, registry: SchemaRegistry | None = None) -> None:
        self._wire = wire
        self._registry = registry
        self._logger = logging.getLogger("core.codec.decoder")

    def decode(self, ty: Type, data: bytes) -> Any:
        tree = self._wire.unpack(data)
        value = self.lift(ty, tree)
        self._logger.debug(f"Decoded {len(data)} bytes as {ty}")
        return value

    def lift(self, ty: Type, node: Any, path: str = "$", scope: SchemaRegistry | None = None) -> Any:
        """Turn a wire tree into a value of `ty`."""
        kind = ty.kind

        if kind in INTEGER_RANGES:
            if type(node) is not int:
                raise self._mismatch(ty, node, path)
            lo, hi = INTEGER_RANGES[kind]
            if not lo <= node <= hi:
                raise MalformedWireValue(f"{node} is out of range for {kind}", path)
            return node

        match kind:
            case TypeKind.bool:
                if type(node) is not bool:
                    raise self._mismatch(ty, node, path)
                return node

            case TypeKind.f32 | TypeKind.f64:
                if type(node) is not float:
                    raise self._mismatch(ty, node, path)
                if kind is TypeKind.f32 and not self._fits_f32(node):
                    raise MalformedWireValue(f"{node} is not representable as f32", path)
                return node

            case TypeKind.string:
                if type(node) is not str:
                    raise self._mismatch(ty, node, path)
                return node

            case TypeKind.bytes:
                if type(node) is not bytes:
                    raise self._mismatch(ty, node, path)
                return node

            case TypeKind.address:
                if type(node) is not bytes:
                    raise self._mismatch(ty, node, path)
                if len(node) != Address.SIZE:
                    raise MalformedWireValue(f"Address must be {Address.SIZE} bytes, got {len(node)}", path)
                return Address(node)

            case TypeKind.balance:
                if not isinstance(node, BigNum):
                    raise self._mismatch(ty, node, path)
                return Balance(node)

            case TypeKind.tuple:
                if not isinstance(node, (tuple, list)):
                    raise self._mismatch(ty, node, path)
                if len(node) != len(ty.params):
                    raise MalformedWireValue(f"{ty} expects {len(ty.params)} elements, got {len(node)}", path)
                return tuple(self.lift(t, item, f"{path}[{i}]", scope) for i, (t, item) in enumerate(zip(ty.params, node)))

            case TypeKind.array | TypeKind.list:
                if not isinstance(node, (tuple, list)):
                    raise self._mismatch(ty, node, path)
                if not compatible(ty, observed_sequence(ty.element, len(node))):
                    raise ArrayLengthMismatch(ty.length, len(node), path)
                return [self.lift(ty.element, item, f"{path}[{i}]", scope) for i, item in enumerate(node)]

            case TypeKind.set:
                if not isinstance(node, (tuple, list)):
                    raise self._mismatch(ty, node, path)
                items = [self.lift(ty.element, item, f"{path}[{i}]", scope) for i, item in enumerate(node)]
                try:
                    result = frozenset(items)
                except TypeError as ex:
                    raise MalformedWireValue(f"{ty} cannot hold its elements: {ex}", path) from ex
                if len(result) != len(items):
                    raise MalformedWireValue(f"{ty} holds duplicate elements", path)
                return result

            case TypeKind.map:
                if not isinstance(node, dict):
                    raise self._mismatch(ty, node, path)
                key_type, value_type = ty.params
                entries = [
                    (self.lift(key_type, k, f"{path}<key>", scope), self.lift(value_type, v, f"{path}[{k!r}]", scope))
                    for k, v in node.items()
                ]
                try:
                    return dict(entries)
                except TypeError as ex:
                    raise MalformedWireValue(f"{ty} cannot hold its keys: {ex}", path) from ex

            case TypeKind.optional:
                if node is None:
                    return None
                return self.lift(ty.element, node, path, scope)

            case TypeKind.result:
                return self._lift_result(ty, node, path, scope)

            case TypeKind.defined:
                return self._lift_defined(ty, node, path, scope)

        raise MalformedWireValue(f"Unsupported type {ty}", path)

    def _lift_result(self, ty: Type, node: Any, path: str, scope: SchemaRegistry | None) -> Ok | Err:
        if not isinstance(node, dict):
            raise self._mismatch(ty, node, path)
        if len(node) != 1:
            raise MalformedWireValue(f"Result must carry exactly one of 'Ok'/'Err', got {len(node)} keys", path)

        ok_type, err_type = ty.params
        [(key, inner)] = node.items()
        if key == "Ok":
            return Ok(self.lift(ok_type, inner, f"{path}.Ok", scope))
        if key == "Err":
            return Err(self.lift(err_type, inner, f"{path}.Err", scope))
        raise MalformedWireValue(f"Unexpected Result key {key!r}", path)

    def _lift_defined(self, ty: Type, node: Any, path: str, scope: SchemaRegistry | None) -> Any:
        if scope is None:
            scope = self._registry
        if scope is None:
            raise UnknownTypeReference(str(ty), path)
        # references inside the definition resolve where it was declared
        typedef, scope = scope.lookup(ty, path)

        if isinstance(typedef, EnumDef):
            if type(node) is not str:
                raise self._mismatch(ty, node, path)
            if node not in typedef.variants:
                raise InvalidEnumVariant(typedef.name, node, path)
            return node

        if not isinstance(node, dict):
            raise self._mismatch(ty, node, path)

        value = {}
        for f in typedef.fields:
            if f.name not in node:
                raise MissingField(typedef.name, f.name, path)
            value[f.name] = self.lift(f.type, node[f.name], f"{path}.{f.name}", scope)
        return value

    @staticmethod
    def _fits_f32(value: float) -> bool:
        if math.isnan(value) or math.isinf(value):
            return True
        try:
            return struct.unpack(">f", struct.pack(">f", value))[0] == value
        except OverflowError:
            return False

    @staticmethod
    def _mismatch(ty: Type, node: Any, path: str) -> MalformedWireValue:
        return MalformedWireValue(f"Expected {ty}, got wire {type(node).__name__}", path)
