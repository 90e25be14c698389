import logging
import struct
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from idlwire.core.errors import UnknownTypeReference
from idlwire.core.models.schema import EnumDef
from idlwire.core.models.types import INTEGER_RANGES, Type, TypeKind
from idlwire.core.models.values import Address, Balance, Err, Ok
from idlwire.core.ports.wire import BigNum, WireFormat
from idlwire.core.schema.registry import SchemaRegistry


class Encoder:
    """
    Maps typed values to canonical wire bytes.

    Encoding is total over well-typed values. A value that does not match
    its declared type is a bug in the caller, so it raises TypeError or
    ValueError straight away instead of producing bytes.

    The encoder keeps no state between calls; the registry is only read
    to resolve defined types.
    """
    def __init__(self, wire: WireFormat, registry: SchemaRegistry | None = None) -> None:
        self._wire = wire
        self._registry = registry
        self._logger = logging.getLogger("core.codec.encoder")

    def encode(self, ty: Type, value: Any) -> bytes:
        data = self._wire.pack(self.lower(ty, value))
        self._logger.debug(f"Encoded {ty} into {len(data)} bytes")
        return data

    def lower(self, ty: Type, value: Any, path: str = "$", scope: SchemaRegistry | None = None) -> Any:
        """Turn a typed value into the wire tree its bytes are packed from."""
        kind = ty.kind

        if kind in INTEGER_RANGES:
            lo, hi = INTEGER_RANGES[kind]
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{kind} expected at {path}, got {type(value).__name__}")
            if not lo <= value <= hi:
                raise ValueError(f"{value} is out of range for {kind} at {path}")
            return int(value)

        match kind:
            case TypeKind.bool:
                if not isinstance(value, bool):
                    raise TypeError(f"bool expected at {path}, got {type(value).__name__}")
                return value

            case TypeKind.f32 | TypeKind.f64:
                if not isinstance(value, (int, float)) or isinstance(value, bool):
                    raise TypeError(f"{kind} expected at {path}, got {type(value).__name__}")
                if kind is TypeKind.f64:
                    return float(value)
                try:
                    return struct.unpack(">f", struct.pack(">f", value))[0]
                except OverflowError as ex:
                    raise ValueError(f"{value} does not fit in f32 at {path}") from ex

            case TypeKind.string:
                if not isinstance(value, str):
                    raise TypeError(f"string expected at {path}, got {type(value).__name__}")
                return str(value)

            case TypeKind.bytes:
                if not isinstance(value, (bytes, bytearray, memoryview)):
                    raise TypeError(f"bytes expected at {path}, got {type(value).__name__}")
                return bytes(value)

            case TypeKind.address:
                if not isinstance(value, (bytes, bytearray, memoryview)):
                    raise TypeError(f"address expected at {path}, got {type(value).__name__}")
                return bytes(Address(value))

            case TypeKind.balance:
                if not isinstance(value, int) or isinstance(value, bool):
                    raise TypeError(f"balance expected at {path}, got {type(value).__name__}")
                return BigNum(Balance(value))

            case TypeKind.tuple:
                items = self._sequence(value, path)
                if len(items) != len(ty.params):
                    raise ValueError(f"{ty} expects {len(ty.params)} elements at {path}, got {len(items)}")
                return [self.lower(t, v, f"{path}[{i}]", scope) for i, (t, v) in enumerate(zip(ty.params, items))]

            case TypeKind.array | TypeKind.list:
                items = self._sequence(value, path)
                if kind is TypeKind.array and len(items) != ty.length:
                    raise ValueError(f"{ty} expects {ty.length} elements at {path}, got {len(items)}")
                return [self.lower(ty.element, v, f"{path}[{i}]", scope) for i, v in enumerate(items)]

            case TypeKind.set:
                if not isinstance(value, Iterable) or isinstance(value, (str, bytes, Mapping)):
                    raise TypeError(f"set expected at {path}, got {type(value).__name__}")
                lowered = [self.lower(ty.element, v, f"{path}{{}}", scope) for v in value]
                return self._canonical_order(lowered, ty, path)

            case TypeKind.map:
                if not isinstance(value, Mapping):
                    raise TypeError(f"mapping expected at {path}, got {type(value).__name__}")
                key_type, value_type = ty.params
                entries = [
                    (self.lower(key_type, k, f"{path}<key>", scope), self.lower(value_type, v, f"{path}[{k!r}]", scope))
                    for k, v in value.items()
                ]
                entries.sort(key=lambda entry: self._wire.pack(entry[0]))
                return {self._hashable(k): v for k, v in entries}

            case TypeKind.optional:
                if value is None:
                    return None
                return self.lower(ty.element, value, path, scope)

            case TypeKind.result:
                ok_type, err_type = ty.params
                if isinstance(value, Ok):
                    return {"Ok": self.lower(ok_type, value.value, f"{path}.Ok", scope)}
                if isinstance(value, Err):
                    return {"Err": self.lower(err_type, value.error, f"{path}.Err", scope)}
                raise TypeError(f"Ok or Err expected at {path}, got {type(value).__name__}")

            case TypeKind.defined:
                return self._lower_defined(ty, value, path, scope)

        raise TypeError(f"Unsupported type {ty} at {path}")

    def _lower_defined(self, ty: Type, value: Any, path: str, scope: SchemaRegistry | None) -> Any:
        if scope is None:
            scope = self._registry
        if scope is None:
            raise UnknownTypeReference(str(ty), path)
        # references inside the definition resolve where it was declared
        typedef, scope = scope.lookup(ty, path)

        if isinstance(typedef, EnumDef):
            if not isinstance(value, str):
                raise TypeError(f"variant of enum '{typedef.name}' expected at {path}, got {type(value).__name__}")
            if value not in typedef.variants:
                raise ValueError(f"'{value}' is not a variant of enum '{typedef.name}' at {path}")
            return str.__str__(value)

        if not isinstance(value, Mapping):
            raise TypeError(f"mapping expected for '{typedef.name}' at {path}, got {type(value).__name__}")

        lowered = {}
        for f in typedef.fields:
            if f.name not in value:
                raise ValueError(f"Field '{f.name}' of '{typedef.name}' missing at {path}")
            lowered[f.name] = self.lower(f.type, value[f.name], f"{path}.{f.name}", scope)
        return lowered

    def _canonical_order(self, lowered: list[Any], ty: Type, path: str) -> list[Any]:
        keyed = sorted(((self._wire.pack(item), item) for item in lowered), key=lambda pair: pair[0])
        for (a, _), (b, _) in zip(keyed, keyed[1:]):
            if a == b:
                raise ValueError(f"{ty} holds duplicate elements at {path}")
        return [item for _, item in keyed]

    @staticmethod
    def _sequence(value: Any, path: str) -> Sequence[Any]:
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
            raise TypeError(f"sequence expected at {path}, got {type(value).__name__}")
        return value

    @classmethod
    def _hashable(cls, node: Any) -> Any:
        """Lowered tuple keys come back as lists; dict keys need tuples."""
        if isinstance(node, list):
            return tuple(cls._hashable(item) for item in node)
        return node
