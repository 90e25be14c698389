from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Iterator


class TypeKind(StrEnum):
    """
    Discriminant of a Type.
    The string values are the names used by interface documents.
    """
    bool = "bool"
    u8 = "u8"
    i8 = "i8"
    u16 = "u16"
    i16 = "i16"
    u32 = "u32"
    i32 = "i32"
    u64 = "u64"
    i64 = "i64"
    f32 = "f32"
    f64 = "f64"
    string = "string"
    bytes = "bytes"
    address = "address"
    balance = "balance"
    tuple = "tuple"
    array = "array"
    list = "list"
    set = "set"
    map = "map"
    optional = "optional"
    result = "result"
    defined = "defined"


INTEGER_RANGES: dict[TypeKind, tuple[int, int]] = {
    TypeKind.u8: (0, (1 << 8) - 1),
    TypeKind.i8: (-(1 << 7), (1 << 7) - 1),
    TypeKind.u16: (0, (1 << 16) - 1),
    TypeKind.i16: (-(1 << 15), (1 << 15) - 1),
    TypeKind.u32: (0, (1 << 32) - 1),
    TypeKind.i32: (-(1 << 31), (1 << 31) - 1),
    TypeKind.u64: (0, (1 << 64) - 1),
    TypeKind.i64: (-(1 << 63), (1 << 63) - 1),
}
"""
Inclusive (min, max) bounds of every fixed-width integer kind.
"""

FLOAT_KINDS = frozenset({TypeKind.f32, TypeKind.f64})

SCALAR_KINDS = frozenset({
    TypeKind.bool,
    *INTEGER_RANGES,
    *FLOAT_KINDS,
    TypeKind.string,
    TypeKind.bytes,
    TypeKind.address,
    TypeKind.balance,
})

SEQUENCE_KINDS = frozenset({TypeKind.array, TypeKind.list})


@dataclass(frozen=True, slots=True)
class Type:
    """
    Recursive description of a value shape.

    A Type is a tagged variant: `kind` selects the variant and the remaining
    attributes carry its payload. Unused attributes keep their defaults, so
    two Types are equal exactly when they describe the same shape.

        tuple     params = element types
        array     params = (element,), length = n
        list/set  params = (element,)
        map       params = (key, value)
        optional  params = (inner,)
        result    params = (ok, err)
        defined   name, namespace (None for the declaring interface)
    """
    kind: TypeKind
    params: tuple[Type, ...] = ()
    length: int | None = None
    name: str | None = None
    namespace: str | None = None

    @classmethod
    def scalar(cls, kind: TypeKind) -> Type:
        return cls(kind)

    @classmethod
    def tuple(cls, *elements: Type) -> Type:
        return cls(TypeKind.tuple, params=elements)

    @classmethod
    def array(cls, element: Type, length: int) -> Type:
        return cls(TypeKind.array, params=(element,), length=length)

    @classmethod
    def list(cls, element: Type) -> Type:
        return cls(TypeKind.list, params=(element,))

    @classmethod
    def set(cls, element: Type) -> Type:
        return cls(TypeKind.set, params=(element,))

    @classmethod
    def map(cls, key: Type, value: Type) -> Type:
        return cls(TypeKind.map, params=(key, value))

    @classmethod
    def optional(cls, inner: Type) -> Type:
        return cls(TypeKind.optional, params=(inner,))

    @classmethod
    def result(cls, ok: Type, err: Type) -> Type:
        return cls(TypeKind.result, params=(ok, err))

    @classmethod
    def defined(cls, name: str, namespace: str | None = None) -> Type:
        return cls(TypeKind.defined, name=name, namespace=namespace)

    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    @property
    def element(self) -> Type:
        """Element type of an array, list, set or optional."""
        return self.params[0]

    def children(self) -> tuple[Type, ...]:
        return self.params

    def walk(self) -> Iterator[Type]:
        """Yield this type and every nested type, pre-order."""
        stack = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.params))

    def __str__(self) -> str:
        match self.kind:
            case TypeKind.array:
                return f"array<{self.element}, {self.length}>"
            case TypeKind.defined:
                if self.namespace:
                    return f"{self.namespace}::{self.name}"
                return str(self.name)
            case TypeKind.tuple:
                return "(" + ", ".join(str(p) for p in self.params) + ")"
            case _ if self.params:
                return f"{self.kind}<" + ", ".join(str(p) for p in self.params) + ">"
            case _:
                return str(self.kind)


BOOL = Type(TypeKind.bool)
U8 = Type(TypeKind.u8)
I8 = Type(TypeKind.i8)
U16 = Type(TypeKind.u16)
I16 = Type(TypeKind.i16)
U32 = Type(TypeKind.u32)
I32 = Type(TypeKind.i32)
U64 = Type(TypeKind.u64)
I64 = Type(TypeKind.i64)
F32 = Type(TypeKind.f32)
F64 = Type(TypeKind.f64)
STRING = Type(TypeKind.string)
BYTES = Type(TypeKind.bytes)
ADDRESS = Type(TypeKind.address)
BALANCE = Type(TypeKind.balance)
