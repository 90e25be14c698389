from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from idlwire.core.errors import DocumentError
from idlwire.core.models.types import Type, TypeKind


@dataclass(frozen=True, slots=True)
class Field:
    name: str
    type: Type

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": type_to_dict(self.type)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Field:
        return cls(name=_require(data, "name", str), type=type_from_dict(_require(data, "type", (dict, str))))


@dataclass(frozen=True, slots=True)
class StructDef:
    """
    A record type: an ordered sequence of named fields.
    Values travel as a map keyed by field name, in declared order.
    """
    name: str
    fields: tuple[Field, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "struct",
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True, slots=True)
class EnumDef:
    """
    A closed set of string variants without associated data.
    A value is the variant name itself, never an ordinal.
    """
    name: str
    variants: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "enum",
            "name": self.name,
            "variants": [{"name": v} for v in self.variants],
        }


@dataclass(frozen=True, slots=True)
class EventDef:
    """
    A struct-shaped record emitted by a service.

    `indexed` names up to MAX_INDEXED fields flagged for external lookup.
    """
    MAX_INDEXED = 3

    name: str
    fields: tuple[Field, ...] = ()
    indexed: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        fields = []
        for f in self.fields:
            entry = f.to_dict()
            if f.name in self.indexed:
                entry["indexed"] = True
            fields.append(entry)

        data: dict[str, Any] = {"type": "event", "name": self.name, "fields": fields}
        # names that are not fields cannot be expressed as flags
        dangling = [name for name in self.indexed if name not in {f.name for f in self.fields}]
        if dangling:
            data["indexed"] = list(self.indexed)
        return data


TypeDef = StructDef | EnumDef | EventDef


def typedef_from_dict(data: dict[str, Any]) -> TypeDef:
    kind = _require(data, "type", str)
    name = _require(data, "name", str)

    match kind:
        case "struct":
            fields = tuple(Field.from_dict(f) for f in _require(data, "fields", list))
            return StructDef(name=name, fields=fields)
        case "enum":
            variants = []
            for variant in _require(data, "variants", list):
                if isinstance(variant, str):
                    variants.append(variant)
                elif isinstance(variant, dict) and not variant.get("fields"):
                    variants.append(_require(variant, "name", str))
                else:
                    raise DocumentError(f"Enum '{name}' variants cannot carry data: {variant!r}")
            return EnumDef(name=name, variants=tuple(variants))
        case "event":
            raw_fields = _require(data, "fields", list)
            fields = tuple(Field.from_dict(f) for f in raw_fields)
            if "indexed" in data:
                indexed = tuple(data["indexed"])
            else:
                indexed = tuple(f["name"] for f in raw_fields if f.get("indexed"))
            return EventDef(name=name, fields=fields, indexed=indexed)
        case _:
            raise DocumentError(f"Unknown type definition kind '{kind}' for '{name}'")


@dataclass(frozen=True, slots=True)
class Function:
    """
    An RPC entry point.

    `mutating` is advisory metadata for binding generators and is never
    checked by this package.
    """
    name: str
    inputs: tuple[Field, ...] = ()
    output: Type | None = None
    mutating: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "mutability": "mutable" if self.mutating else "immutable",
        }
        if self.inputs:
            data["inputs"] = [f.to_dict() for f in self.inputs]
        if self.output is not None:
            data["output"] = type_to_dict(self.output)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Function:
        mutability = data.get("mutability", "immutable")
        if mutability not in ("mutable", "immutable"):
            raise DocumentError(f"Invalid mutability '{mutability}'")
        output = data.get("output")
        return cls(
            name=_require(data, "name", str),
            inputs=tuple(Field.from_dict(f) for f in data.get("inputs", [])),
            output=type_from_dict(output) if output is not None else None,
            mutating=mutability == "mutable",
        )


@dataclass(frozen=True, slots=True)
class Constructor:
    """
    Deploy-time entry point. It returns nothing on success; `error` is the
    type reported when construction fails.
    """
    inputs: tuple[Field, ...] = ()
    error: Type | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputs": [f.to_dict() for f in self.inputs],
            "error": type_to_dict(self.error) if self.error is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Constructor:
        error = data.get("error")
        return cls(
            inputs=tuple(Field.from_dict(f) for f in data.get("inputs", [])),
            error=type_from_dict(error) if error is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Import:
    name: str
    version: str = "*"
    registry: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "version": self.version}
        if self.registry is not None:
            data["registry"] = self.registry
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> Import:
        if isinstance(data, str):
            return cls(name=data)
        return cls(
            name=_require(data, "name", str),
            version=data.get("version", "*"),
            registry=data.get("registry"),
        )


@dataclass(frozen=True, slots=True)
class Interface:
    """
    One RPC schema document: the types it declares, the functions it
    exposes and its constructor.

    `build_version` records the version of the tool that produced the
    document. It is metadata only and never checked.

    Interfaces are immutable; once validated they are shared read-only.
    """
    name: str
    constructor: Constructor = field(default_factory=Constructor)
    imports: tuple[Import, ...] = ()
    type_defs: tuple[TypeDef, ...] = ()
    functions: tuple[Function, ...] = ()
    namespace: str = ""
    version: str = "0.0.0"
    build_version: str = ""

    def function(self, name: str) -> Function | None:
        for fn in self.functions:
            if fn.name == name:
                return fn
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        data["version"] = self.version
        if self.imports:
            data["imports"] = [i.to_dict() for i in self.imports]
        if self.type_defs:
            data["type_defs"] = [t.to_dict() for t in self.type_defs]
        data["constructor"] = self.constructor.to_dict()
        if self.functions:
            data["functions"] = [f.to_dict() for f in self.functions]
        if self.build_version:
            data["build_version"] = self.build_version
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Interface:
        if not isinstance(data, dict):
            raise DocumentError(f"Interface document must be a mapping, got {type(data).__name__}")
        name = _require(data, "name", str)
        return cls(
            name=name,
            namespace=data.get("namespace", ""),
            version=str(data.get("version", "0.0.0")),
            imports=tuple(Import.from_dict(i) for i in data.get("imports", [])),
            type_defs=tuple(typedef_from_dict(t) for t in data.get("type_defs", [])),
            constructor=Constructor.from_dict(data.get("constructor") or {}),
            functions=tuple(Function.from_dict(f) for f in data.get("functions", [])),
            build_version=str(data.get("build_version", "")),
        )


def type_to_dict(ty: Type) -> dict[str, Any]:
    """
    Document form of a Type, adjacently tagged:
        {"type": "u32"}
        {"type": "array", "params": [{"type": "u8"}, 4]}
        {"type": "defined", "params": {"type": "Owner", "namespace": "ledger"}}
    """
    match ty.kind:
        case TypeKind.tuple | TypeKind.map | TypeKind.result:
            params: Any = [type_to_dict(p) for p in ty.params]
        case TypeKind.array:
            params = [type_to_dict(ty.element), ty.length]
        case TypeKind.list | TypeKind.set | TypeKind.optional:
            params = type_to_dict(ty.element)
        case TypeKind.defined:
            params = {"type": ty.name}
            if ty.namespace is not None:
                params["namespace"] = ty.namespace
        case _:
            return {"type": str(ty.kind)}

    return {"type": str(ty.kind), "params": params}


def type_from_dict(data: dict[str, Any] | str) -> Type:
    if isinstance(data, str):
        data = {"type": data}

    raw_kind = _require(data, "type", str)
    try:
        kind = TypeKind(raw_kind)
    except ValueError:
        raise DocumentError(f"Unknown type '{raw_kind}'") from None

    params = data.get("params")

    match kind:
        case TypeKind.tuple:
            return Type.tuple(*(type_from_dict(p) for p in _expect_list(params, kind, None)))
        case TypeKind.array:
            element, length = _expect_list(params, kind, 2)
            if not isinstance(length, int) or isinstance(length, bool) or length < 0:
                raise DocumentError(f"Array length must be a non-negative integer, got {length!r}")
            return Type.array(type_from_dict(element), length)
        case TypeKind.list | TypeKind.set | TypeKind.optional:
            if not isinstance(params, (dict, str)):
                raise DocumentError(f"'{kind}' expects one type parameter")
            return Type(kind, params=(type_from_dict(params),))
        case TypeKind.map | TypeKind.result:
            first, second = _expect_list(params, kind, 2)
            return Type(kind, params=(type_from_dict(first), type_from_dict(second)))
        case TypeKind.defined:
            if not isinstance(params, dict):
                raise DocumentError("'defined' expects a {type, namespace} mapping")
            return Type.defined(_require(params, "type", str), params.get("namespace"))
        case _:
            return Type(kind)


def _expect_list(params: Any, kind: TypeKind, size: int | None) -> list[Any]:
    if not isinstance(params, list) or (size is not None and len(params) != size):
        expected = "a list" if size is None else f"a list of {size}"
        raise DocumentError(f"'{kind}' expects {expected} as params, got {params!r}")
    return params


def _require(data: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    try:
        value = data[key]
    except (KeyError, TypeError):
        raise DocumentError(f"Missing key '{key}' in {data!r}") from None
    if not isinstance(value, kind):
        raise DocumentError(f"Key '{key}' has unexpected type {type(value).__name__}")
    return value
