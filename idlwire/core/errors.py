class IdlError(Exception):
    """Base class of every error raised by idlwire."""


class SchemaError(IdlError):
    """A defect found in an interface definition."""


class DuplicateName(SchemaError):
    def __init__(self, name: str, scope: str) -> None:
        super().__init__(f"Duplicate name '{name}' in {scope}")
        self.name = name
        self.scope = scope


class UnknownImport(SchemaError):
    def __init__(self, name: str, interface: str) -> None:
        super().__init__(f"Interface '{interface}' imports unknown interface '{name}'")
        self.name = name
        self.interface = interface


class InvalidMapKey(SchemaError):
    def __init__(self, key_type: str, location: str) -> None:
        super().__init__(f"Type '{key_type}' cannot be used as a map key or set element in {location}")
        self.key_type = key_type
        self.location = location


class CyclicImport(SchemaError):
    def __init__(self, cycle: list[str]) -> None:
        super().__init__("Cyclic import: " + " -> ".join(cycle))
        self.cycle = cycle


class TooManyIndexedFields(SchemaError):
    def __init__(self, event: str, count: int, limit: int) -> None:
        super().__init__(f"Event '{event}' declares {count} indexed fields (at most {limit} allowed)")
        self.event = event
        self.count = count
        self.limit = limit


class IndexedFieldNotFound(SchemaError):
    def __init__(self, event: str, field: str) -> None:
        super().__init__(f"Event '{event}' indexes unknown field '{field}'")
        self.event = event
        self.field = field


class InterfaceValidationError(IdlError):
    """
    Every violation found while validating one interface.

    Validation never stops at the first defect; `errors` holds all of them
    in the order the checks ran.
    """
    def __init__(self, interface: str, errors: list[SchemaError]) -> None:
        lines = [f"Interface '{interface}' failed validation ({len(errors)} errors):"]
        lines.extend(f"  - {err}" for err in errors)
        super().__init__("\n".join(lines))
        self.interface = interface
        self.errors = errors


class DecodeError(IdlError):
    """
    Raised when wire bytes cannot be turned into a value of the expected type.
    `path` locates the failing value inside the decoded structure.
    """
    def __init__(self, message: str, path: str = "$") -> None:
        super().__init__(f"{message} at {path}")
        self.reason = message
        self.path = path


class UnknownTypeReference(SchemaError, DecodeError):
    def __init__(self, name: str, location: str = "$") -> None:
        DecodeError.__init__(self, f"Unknown type reference '{name}'", location)
        self.name = name
        self.location = location


class ArrayLengthMismatch(DecodeError):
    def __init__(self, expected: int, observed: int, path: str = "$") -> None:
        super().__init__(f"Expected {expected} elements, got {observed}", path)
        self.expected = expected
        self.observed = observed


class InvalidEnumVariant(DecodeError):
    def __init__(self, enum: str, variant: str, path: str = "$") -> None:
        super().__init__(f"'{variant}' is not a variant of enum '{enum}'", path)
        self.enum = enum
        self.variant = variant


class MissingField(DecodeError):
    def __init__(self, type_name: str, field: str, path: str = "$") -> None:
        super().__init__(f"Missing field '{field}' of '{type_name}'", path)
        self.type_name = type_name
        self.field = field


class MalformedWireValue(DecodeError):
    pass


class UnknownMethod(DecodeError):
    def __init__(self, method: str, interface: str) -> None:
        super().__init__(f"Interface '{interface}' has no function '{method}'", "$.method")
        self.method = method


class ArityMismatch(DecodeError):
    def __init__(self, method: str, expected: int, observed: int) -> None:
        super().__init__(f"'{method}' takes {expected} arguments, got {observed}", "$.payload")
        self.method = method
        self.expected = expected
        self.observed = observed


class DocumentError(IdlError):
    """Raised when an interface document cannot be parsed."""
