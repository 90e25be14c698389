import msgpack
import pytest

from idlwire.core.codec.decoder import Decoder
from idlwire.core.errors import (
    ArrayLengthMismatch,
    DecodeError,
    InvalidEnumVariant,
    MalformedWireValue,
    MissingField,
    UnknownTypeReference,
)
from idlwire.core.models.types import ADDRESS, BALANCE, BOOL, F32, F64, STRING, U8, U16, U32, Type
from idlwire.core.models.values import Address, Balance, Err, Ok
from tests.utils import make_account, make_address


@pytest.fixture
def decoder(wire, registry):
    return Decoder(wire, registry)


def pack(obj):
    return msgpack.packb(obj, use_bin_type=True)


@pytest.mark.ut
def test_tuple(decoder):
    assert decoder.decode(Type.tuple(U32, STRING), pack([7, "ok"])) == (7, "ok")


@pytest.mark.ut
def test_tuple_arity_is_checked(decoder):
    with pytest.raises(MalformedWireValue):
        decoder.decode(Type.tuple(U32, STRING), pack([7]))


@pytest.mark.ut
def test_array_length_mismatch(decoder):
    with pytest.raises(ArrayLengthMismatch) as exc:
        decoder.decode(Type.array(U8, 4), pack([1, 2, 3]))

    assert exc.value.expected == 4
    assert exc.value.observed == 3
    assert exc.value.path == "$"


@pytest.mark.ut
def test_list_accepts_any_length(decoder):
    assert decoder.decode(Type.list(U8), pack([])) == []
    assert decoder.decode(Type.list(U8), pack([1, 2, 3])) == [1, 2, 3]


@pytest.mark.ut
def test_result(decoder):
    ty = Type.result(U32, STRING)

    assert decoder.decode(ty, pack({"Ok": 5})) == Ok(5)
    assert decoder.decode(ty, pack({"Err": "bad"})) == Err("bad")


@pytest.mark.ut
@pytest.mark.parametrize("node", [{}, {"Ok": 1, "Err": "x"}, {"Maybe": 1}, [1]])
def test_malformed_result(decoder, node):
    with pytest.raises(MalformedWireValue):
        decoder.decode(Type.result(U32, STRING), pack(node))


@pytest.mark.ut
def test_balance(decoder):
    assert decoder.decode(BALANCE, b"\xc7\x00\x02") == 0
    value = decoder.decode(BALANCE, b"\xc7\x0d\x02\x10" + b"\x00" * 12)

    assert value == 2 ** 100
    assert isinstance(value, Balance)


@pytest.mark.ut
def test_balance_rejects_non_canonical_magnitude(decoder):
    with pytest.raises(MalformedWireValue):
        decoder.decode(BALANCE, b"\xd5\x02\x00\x01")


@pytest.mark.ut
def test_balance_rejects_plain_integer(decoder):
    with pytest.raises(MalformedWireValue):
        decoder.decode(BALANCE, pack(5))


@pytest.mark.ut
def test_address(decoder):
    addr = make_address(9)
    value = decoder.decode(ADDRESS, pack(bytes(addr)))

    assert value == addr
    assert isinstance(value, Address)

    with pytest.raises(MalformedWireValue):
        decoder.decode(ADDRESS, pack(b"\x01" * 21))


@pytest.mark.ut
def test_integer_range_and_kind(decoder):
    with pytest.raises(MalformedWireValue):
        decoder.decode(U8, pack(256))
    with pytest.raises(MalformedWireValue):
        decoder.decode(U16, pack(-1))
    with pytest.raises(MalformedWireValue):
        decoder.decode(U8, pack(True))
    with pytest.raises(MalformedWireValue):
        decoder.decode(BOOL, pack(1))


@pytest.mark.ut
def test_floats(decoder):
    assert decoder.decode(F64, pack(0.1)) == 0.1
    assert decoder.decode(F32, pack(0.5)) == 0.5

    with pytest.raises(MalformedWireValue):
        decoder.decode(F32, pack(0.1))


@pytest.mark.ut
def test_string_and_bytes_are_not_interchangeable(decoder):
    with pytest.raises(MalformedWireValue):
        decoder.decode(STRING, pack(b"abc"))


@pytest.mark.ut
def test_struct(decoder):
    account = make_account(4, balance=7, tags=["a", "b"])
    node = {"owner": bytes(account["owner"]), "balance": msgpack.ExtType(2, b"\x07"), "tags": ["a", "b"]}

    assert decoder.decode(Type.defined("Account"), pack(node)) == account


@pytest.mark.ut
def test_struct_missing_field(decoder):
    node = {"owner": bytes(make_address()), "tags": []}

    with pytest.raises(MissingField) as exc:
        decoder.decode(Type.defined("Account"), pack(node))

    assert exc.value.field == "balance"
    assert exc.value.type_name == "Account"


@pytest.mark.ut
def test_struct_extra_keys_are_ignored(decoder):
    node = {"symbol": "GLD", "kind": "Unique", "decimals": 8}

    assert decoder.decode(Type.defined("Token", "tokens"), pack(node)) == {"symbol": "GLD", "kind": "Unique"}


@pytest.mark.ut
def test_enum_closure(decoder):
    assert decoder.decode(Type.defined("Status"), pack("Closed")) == "Closed"

    with pytest.raises(InvalidEnumVariant) as exc:
        decoder.decode(Type.defined("Status"), pack("Melted"))

    assert exc.value.variant == "Melted"


@pytest.mark.ut
def test_error_path_points_at_nested_value(decoder):
    node = {"token": {"symbol": "GLD", "kind": "Gold"}, "status": "Active", "history": None}

    with pytest.raises(InvalidEnumVariant) as exc:
        decoder.decode(Type.defined("Holding"), pack(node))

    assert exc.value.path == "$.token.kind"


@pytest.mark.ut
def test_recursive_struct(decoder):
    inner = {"token": {"symbol": "A", "kind": "Unique"}, "status": "Closed", "history": None}
    outer = {"token": {"symbol": "B", "kind": "Fungible"}, "status": "Active", "history": inner}

    assert decoder.decode(Type.defined("Holding"), pack(outer)) == outer


@pytest.mark.ut
def test_set_and_map(decoder):
    assert decoder.decode(Type.set(U8), pack([3, 1, 2])) == frozenset({1, 2, 3})
    assert decoder.decode(Type.map(STRING, U8), pack({"a": 1})) == {"a": 1}
    assert decoder.decode(Type.map(Type.tuple(U8, U8), BOOL), pack({(1, 2): False})) == {(1, 2): False}

    with pytest.raises(MalformedWireValue):
        decoder.decode(Type.set(U8), pack([1, 1]))


@pytest.mark.ut
def test_optional(decoder):
    assert decoder.decode(Type.optional(U8), b"\xc0") is None
    assert decoder.decode(Type.optional(U8), b"\x05") == 5


@pytest.mark.ut
@pytest.mark.parametrize("data", [b"", b"\x92\x01", b"\x01\x02", b"\xc1"])
def test_truncated_or_trailing_bytes(decoder, data):
    with pytest.raises(MalformedWireValue):
        decoder.decode(Type.list(U8), data)


@pytest.mark.ut
def test_decode_errors_share_a_base(decoder):
    with pytest.raises(DecodeError):
        decoder.decode(Type.array(U8, 1), pack([]))


@pytest.mark.ut
def test_result_with_repeated_ok_key(decoder):
    with pytest.raises(MalformedWireValue):
        decoder.decode(Type.result(U32, STRING), b"\x82\xa2Ok\x01\xa2Ok\x02")


@pytest.mark.ut
def test_struct_with_repeated_field(decoder):
    data = b"\x83\xa6symbol\xa1A\xa6symbol\xa1B\xa4kind\xa6Unique"

    with pytest.raises(MalformedWireValue):
        decoder.decode(Type.defined("Token", "tokens"), data)


@pytest.mark.ut
def test_unhashable_set_element_from_unchecked_type(wire):
    with pytest.raises(MalformedWireValue) as exc:
        Decoder(wire).decode(Type.set(Type.list(U8)), b"\x91\x91\x01")

    assert exc.value.path == "$"


@pytest.mark.ut
def test_unhashable_map_key_from_unchecked_type(wire):
    with pytest.raises(MalformedWireValue):
        Decoder(wire).decode(Type.map(Type.list(U8), U8), pack({(1,): 2}))


@pytest.mark.ut
def test_defined_type_without_registry(wire):
    with pytest.raises(UnknownTypeReference) as exc:
        Decoder(wire).decode(Type.defined("Account"), pack({}))

    assert exc.value.name == "Account"


@pytest.mark.ut
def test_defined_type_missing_from_registry(decoder):
    with pytest.raises(UnknownTypeReference) as exc:
        decoder.decode(Type.list(Type.defined("Ghost")), pack(["x"]))

    assert exc.value.path == "$[0]"
