from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from idlwire.core.errors import DuplicateName, UnknownTypeReference
from idlwire.core.models.schema import EnumDef, Interface, TypeDef
from idlwire.core.models.types import Type, TypeKind


class SchemaRegistry:
    """
    Holds the user-defined types of one interface and links to the
    registries of the interfaces it imports.

    A registry is filled once and then frozen. Frozen registries are never
    mutated again, so they can be shared by any number of concurrent
    encode/decode calls without locking. Independent registries can live
    side by side in the same process.
    """
    def __init__(self, interface: Interface) -> None:
        self._interface = interface
        self._types: dict[str, TypeDef] = {}
        self._imports: list[SchemaRegistry] = []
        self._frozen = False

    @property
    def name(self) -> str:
        return self._interface.name

    @property
    def interface(self) -> Interface:
        return self._interface

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def imports(self) -> tuple[SchemaRegistry, ...]:
        return tuple(self._imports)

    def register(self, typedef: TypeDef, check_members: bool = True) -> None:
        """
        Add a type definition.

        Raises DuplicateName when a type of the same name is already
        registered or, unless check_members is False, when the definition
        repeats a field or variant name.
        """
        self._ensure_mutable()

        if typedef.name in self._types:
            raise DuplicateName(typedef.name, f"interface '{self.name}'")

        if check_members:
            duplicates = duplicate_members(typedef)
            if duplicates:
                raise duplicates[0]

        self._types[typedef.name] = typedef

    def link(self, registry: SchemaRegistry) -> None:
        """Make the types of an imported interface resolvable from this one."""
        self._ensure_mutable()
        self._imports.append(registry)

    def freeze(self) -> None:
        self._frozen = True

    def get(self, name: str) -> TypeDef | None:
        return self._types.get(name)

    def resolve(self, ty: Type, location: str = "$") -> TypeDef:
        """
        Return the TypeDef a `defined` type refers to.

        A reference without namespace (or naming this interface) is looked
        up locally first, then in the transitively imported interfaces in
        declaration order. A namespaced reference is looked up only in the
        imported interface of that name.
        """
        return self.lookup(ty, location)[0]

    def lookup(self, ty: Type, location: str = "$") -> tuple[TypeDef, SchemaRegistry]:
        """
        Like resolve, but also return the registry of the interface that
        declares the type. References nested in that definition must be
        resolved against the returned registry.
        """
        if ty.kind is not TypeKind.defined:
            raise TypeError(f"Only defined types can be resolved, got '{ty}'")

        for registry in self._candidates(ty.namespace):
            typedef = registry.get(ty.name)
            if typedef is not None:
                return typedef, registry

        raise UnknownTypeReference(str(ty), location)

    def transitive_imports(self) -> Iterator[SchemaRegistry]:
        """
        Yield every registry reachable through imports, breadth first,
        each once. Import cycles are tolerated.
        """
        seen = {id(self)}
        queue = list(self._imports)
        while queue:
            registry = queue.pop(0)
            if id(registry) in seen:
                continue
            seen.add(id(registry))
            yield registry
            queue.extend(registry._imports)

    def _candidates(self, namespace: str | None) -> Iterator[SchemaRegistry]:
        if namespace is None or namespace in (self.name, self._interface.namespace):
            yield self
            if namespace is not None:
                return
            yield from self.transitive_imports()
            return

        for registry in self.transitive_imports():
            if namespace in (registry.name, registry.interface.namespace):
                yield registry
                return

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(f"Schema registry '{self.name}' is frozen")

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[TypeDef]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"SchemaRegistry({self.name!r}, types={list(self._types)})"

    @classmethod
    def build(cls, interface: Interface, library: Mapping[str, Interface]) -> SchemaRegistry:
        """
        Build the (unfrozen) registry graph for an interface and everything
        it imports from the library.

        Building never fails: the first definition of a duplicated name wins
        and unknown imports are skipped. Reporting those defects is the
        validator's job.
        """
        built: dict[str, SchemaRegistry] = {}

        def visit(iface: Interface) -> SchemaRegistry:
            existing = built.get(iface.name)
            if existing is not None:
                return existing

            registry = cls(iface)
            built[iface.name] = registry
            for typedef in iface.type_defs:
                if typedef.name not in registry:
                    registry.register(typedef, check_members=False)

            for imp in iface.imports:
                target = library.get(imp.name)
                if target is not None:
                    registry.link(visit(target))

            return registry

        root = visit(interface)
        logging.getLogger("core.schema.registry").debug(
            f"Built registry graph for '{interface.name}' ({len(built)} interfaces)"
        )
        return root

    def freeze_all(self) -> None:
        self.freeze()
        for registry in self.transitive_imports():
            registry.freeze()


def duplicate_members(typedef: TypeDef) -> list[DuplicateName]:
    """Every repeated field or variant name inside one type definition."""
    if isinstance(typedef, EnumDef):
        names = list(typedef.variants)
        scope = f"variants of enum '{typedef.name}'"
    else:
        names = [f.name for f in typedef.fields]
        scope = f"fields of '{typedef.name}'"

    return [DuplicateName(name, scope) for name in find_duplicates(names)]


def find_duplicates(names: list[str]) -> list[str]:
    """Names occurring more than once, each reported once, in first-repeat order."""
    seen: set[str] = set()
    reported: list[str] = []
    for name in names:
        if name in seen and name not in reported:
            reported.append(name)
        seen.add(name)
    return reported
