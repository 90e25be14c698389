from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from idlwire.core.errors import (
    CyclicImport,
    DuplicateName,
    IndexedFieldNotFound,
    InterfaceValidationError,
    InvalidMapKey,
    SchemaError,
    TooManyIndexedFields,
    UnknownImport,
    UnknownTypeReference,
)
from idlwire.core.models.schema import EnumDef, EventDef, Field, Interface
from idlwire.core.models.types import Type, TypeKind
from idlwire.core.schema.registry import SchemaRegistry, duplicate_members, find_duplicates


HASHABLE_KEY_KINDS = frozenset({
    TypeKind.bool,
    TypeKind.u8, TypeKind.i8, TypeKind.u16, TypeKind.i16,
    TypeKind.u32, TypeKind.i32, TypeKind.u64, TypeKind.i64,
    TypeKind.f32, TypeKind.f64,
    TypeKind.string, TypeKind.bytes, TypeKind.address, TypeKind.balance,
})


class InterfaceValidator:
    """
    Checks one interface, together with the interfaces it imports, for
    internal consistency.

    The checks run in a fixed order:

        1. duplicate names (types, fields, variants, indexed fields, functions, inputs)
        2. import names, type references, map key and set element types
        3. event indexed fields (count and membership)
        4. import cycles

    Every check runs even when an earlier one failed; all violations are
    reported together through a single InterfaceValidationError.
    """
    def __init__(self, interface: Interface, library: Mapping[str, Interface] | None = None) -> None:
        self._interface = interface
        self._library: dict[str, Interface] = dict(library or {})
        self._library[interface.name] = interface
        self._registry = SchemaRegistry.build(interface, self._library)
        self._logger = logging.getLogger("core.schema.validator")

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def collect(self) -> list[SchemaError]:
        """Run every check and return the violations without raising."""
        errors: list[SchemaError] = []
        errors.extend(self._check_duplicates())
        errors.extend(self._check_references())
        errors.extend(self._check_indexed())
        errors.extend(self._check_cycles())
        return errors

    def validate(self) -> SchemaRegistry:
        """
        Validate the interface and return its frozen registry.
        Raises InterfaceValidationError carrying every violation found.
        """
        errors = self.collect()
        if errors:
            for err in errors:
                self._logger.warning(f"{self._interface.name}: {err}")
            raise InterfaceValidationError(self._interface.name, errors)

        self._registry.freeze_all()
        self._logger.info(
            f"Interface '{self._interface.name}' is valid "
            f"({len(self._registry)} types, {len(self._interface.functions)} functions)"
        )
        return self._registry

    def _check_duplicates(self) -> Iterator[SchemaError]:
        iface = self._interface
        scope = f"interface '{iface.name}'"

        for name in find_duplicates([t.name for t in iface.type_defs]):
            yield DuplicateName(name, scope)

        for typedef in iface.type_defs:
            yield from duplicate_members(typedef)
            if isinstance(typedef, EventDef):
                for name in find_duplicates(list(typedef.indexed)):
                    yield DuplicateName(name, f"indexed fields of event '{typedef.name}'")

        for name in find_duplicates([f.name for f in iface.functions]):
            yield DuplicateName(name, f"functions of {scope}")

        for fn in iface.functions:
            for name in find_duplicates([f.name for f in fn.inputs]):
                yield DuplicateName(name, f"inputs of function '{fn.name}'")

        for name in find_duplicates([f.name for f in iface.constructor.inputs]):
            yield DuplicateName(name, "inputs of constructor")

    def _check_references(self) -> Iterator[SchemaError]:
        for imp in self._interface.imports:
            if imp.name not in self._library:
                yield UnknownImport(imp.name, self._interface.name)

        for ty, location in self._types():
            for nested in ty.walk():
                if nested.kind is TypeKind.defined:
                    try:
                        self._registry.resolve(nested, location)
                    except UnknownTypeReference as ex:
                        yield ex
                elif nested.kind in (TypeKind.map, TypeKind.set) and not self._is_hashable(nested.params[0]):
                    yield InvalidMapKey(str(nested.params[0]), location)

    def _check_indexed(self) -> Iterator[SchemaError]:
        for typedef in self._interface.type_defs:
            if not isinstance(typedef, EventDef):
                continue

            if len(typedef.indexed) > EventDef.MAX_INDEXED:
                yield TooManyIndexedFields(typedef.name, len(typedef.indexed), EventDef.MAX_INDEXED)

            names = {f.name for f in typedef.fields}
            for indexed in typedef.indexed:
                if indexed not in names:
                    yield IndexedFieldNotFound(typedef.name, indexed)

    def _check_cycles(self) -> Iterator[SchemaError]:
        """
        Depth-first walk of the import graph reachable from this interface.
        Each cycle is reported once, starting from its first visited member.
        """
        done: set[str] = set()
        path: list[str] = []
        reported: set[frozenset[str]] = set()
        errors: list[SchemaError] = []

        def visit(name: str) -> None:
            if name in path:
                cycle = path[path.index(name):] + [name]
                key = frozenset(cycle)
                if key not in reported:
                    reported.add(key)
                    errors.append(CyclicImport(cycle))
                return
            if name in done:
                return

            iface = self._library.get(name)
            if iface is None:
                return

            path.append(name)
            for imp in iface.imports:
                visit(imp.name)
            path.pop()
            done.add(name)

        visit(self._interface.name)
        return iter(errors)

    def _types(self) -> Iterator[tuple[Type, str]]:
        iface = self._interface
        for typedef in iface.type_defs:
            if isinstance(typedef, EnumDef):
                continue
            kind = "event" if isinstance(typedef, EventDef) else "struct"
            yield from _fields(typedef.fields, f"{kind} '{typedef.name}'")

        for fn in iface.functions:
            yield from _fields(fn.inputs, f"function '{fn.name}'")
            if fn.output is not None:
                yield fn.output, f"output of function '{fn.name}'"

        yield from _fields(iface.constructor.inputs, "constructor")
        if iface.constructor.error is not None:
            yield iface.constructor.error, "error of constructor"

    def _is_hashable(self, ty: Type) -> bool:
        match ty.kind:
            case TypeKind.tuple | TypeKind.optional:
                return all(self._is_hashable(p) for p in ty.params)
            case TypeKind.defined:
                try:
                    return isinstance(self._registry.resolve(ty), EnumDef)
                except UnknownTypeReference:
                    # already reported as an unresolved reference
                    return True
            case kind:
                return kind in HASHABLE_KEY_KINDS


def _fields(fields: tuple[Field, ...], owner: str) -> Iterator[tuple[Type, str]]:
    for f in fields:
        yield f.type, f"field '{f.name}' of {owner}"


def validate(interface: Interface, library: Mapping[str, Interface] | None = None) -> None:
    """Raise InterfaceValidationError if the interface has any defect."""
    InterfaceValidator(interface, library).validate()


def load_registry(interface: Interface, library: Mapping[str, Interface] | None = None) -> SchemaRegistry:
    """Validate an interface and return its frozen, shareable registry."""
    return InterfaceValidator(interface, library).validate()
