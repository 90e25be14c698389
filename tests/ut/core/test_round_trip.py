import pytest

from idlwire.core.models.types import ADDRESS, BALANCE, BYTES, F32, F64, I64, STRING, U8, U32, Type
from idlwire.core.models.values import Err, Ok
from tests.utils import make_account, make_address

HOLDING = {
    "token": {"symbol": "GLD", "kind": "Fungible"},
    "status": "Active",
    "history": {"token": {"symbol": "SLV", "kind": "Unique"}, "status": "Closed", "history": None},
}

CASES = [
    (Type.defined("Account"), make_account(3, 2 ** 100, ["a", "b"])),
    (Type.defined("Transferred"), {"owner": make_address(4), "amount": 5, "extra": b"\x00\x01"}),
    (Type.defined("Status"), "Frozen"),
    (Type.defined("Holding"), HOLDING),
    (Type.defined("Token", "tokens"), {"symbol": "X", "kind": "Unique"}),
    (Type.set(Type.tuple(U8, STRING)), frozenset({(1, "a"), (2, "b")})),
    (Type.map(Type.tuple(ADDRESS, U32), BALANCE), {(make_address(1), 1): 2 ** 64, (make_address(2), 0): 0}),
    (Type.map(Type.defined("Status"), Type.list(BYTES)), {"Active": [b""], "Closed": []}),
    (Type.result(Type.optional(Type.list(U8)), Type.defined("Status")), Ok([1, 2])),
    (Type.result(Type.optional(Type.list(U8)), Type.defined("Status")), Ok(None)),
    (Type.result(Type.optional(Type.list(U8)), Type.defined("Status")), Err("Closed")),
    (Type.optional(Type.result(Type.tuple(), STRING)), Ok(())),
    (Type.optional(Type.result(Type.tuple(), STRING)), None),
    (Type.array(Type.optional(I64), 3), [-2 ** 63, None, 2 ** 63 - 1]),
    (F32, 3.25),
    (F32, float("inf")),
    (F64, 0.1),
    (BALANCE, 2 ** 100),
    (BALANCE, 0),
]


@pytest.mark.ut
@pytest.mark.parametrize("ty,value", CASES, ids=[str(ty) for ty, _ in CASES])
def test_decode_inverts_encode(codec, ty, value):
    assert codec.decode(ty, codec.encode(ty, value)) == value


@pytest.mark.ut
def test_large_balance_bytes_and_value(codec):
    data = codec.encode(BALANCE, 2 ** 100)

    assert data == b"\xc7\x0d\x02\x10" + b"\x00" * 12
    assert codec.decode(BALANCE, data) == 2 ** 100
