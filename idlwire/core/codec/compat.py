from idlwire.core.models.types import SEQUENCE_KINDS, Type, TypeKind


def compatible(declared: Type, observed: Type) -> bool:
    """
    Report whether a value observed with one type may be accepted where
    another type is declared.

    Arrays and lists are wire-identical, so they are convertible in both
    directions as long as their element types are. When both sides carry a
    fixed length (an array declared against the length actually observed)
    the lengths must match. Containers of the same kind are compared
    component-wise; every other pairing requires identical types.
    """
    if declared == observed:
        return True

    if declared.kind in SEQUENCE_KINDS and observed.kind in SEQUENCE_KINDS:
        if declared.kind is TypeKind.array and observed.kind is TypeKind.array:
            if declared.length != observed.length:
                return False
        return compatible(declared.element, observed.element)

    if declared.kind is not observed.kind:
        return False

    match declared.kind:
        case TypeKind.tuple | TypeKind.set | TypeKind.map | TypeKind.optional | TypeKind.result:
            if len(declared.params) != len(observed.params):
                return False
            return all(compatible(d, o) for d, o in zip(declared.params, observed.params))
        case _:
            return False


def observed_sequence(element: Type, length: int) -> Type:
    """The shape of a wire sequence of `length` elements decoded as `element`."""
    return Type.array(element, length)
