from idlwire.core.models.schema import (
    Constructor,
    EnumDef,
    EventDef,
    Field,
    Function,
    Import,
    Interface,
    StructDef,
)
from idlwire.core.models.types import ADDRESS, BALANCE, BYTES, STRING, U32, U64, Type
from idlwire.core.models.values import Address


def make_address(seed: int = 1) -> Address:
    return Address(bytes([seed]) * Address.SIZE)


def make_tokens() -> Interface:
    return Interface(
        name="tokens",
        version="0.3.1",
        type_defs=(
            EnumDef("Kind", ("Fungible", "Unique")),
            StructDef("Token", (Field("symbol", STRING), Field("kind", Type.defined("Kind")))),
        ),
        functions=(
            Function("symbol", output=STRING),
        ),
    )


def make_ledger(**overrides) -> Interface:
    fields = dict(
        name="ledger",
        version="1.0.0",
        imports=(Import("tokens", "0.3.1"),),
        type_defs=(
            StructDef("Account", (
                Field("owner", ADDRESS),
                Field("balance", BALANCE),
                Field("tags", Type.list(STRING)),
            )),
            EnumDef("Status", ("Active", "Frozen", "Closed")),
            EventDef(
                "Transferred",
                (Field("owner", ADDRESS), Field("amount", BALANCE), Field("extra", BYTES)),
                indexed=("owner", "amount"),
            ),
            StructDef("Holding", (
                Field("token", Type.defined("Token", "tokens")),
                Field("status", Type.defined("Status")),
                Field("history", Type.optional(Type.defined("Holding"))),
            )),
        ),
        functions=(
            Function("balance_of", (Field("owner", ADDRESS),), BALANCE),
            Function(
                "transfer",
                (Field("to", ADDRESS), Field("amount", BALANCE)),
                Type.result(Type.tuple(), STRING),
                mutating=True,
            ),
            Function("snapshot", (Field("at", U64),), Type.map(ADDRESS, Type.defined("Account"))),
            Function("ping"),
        ),
        constructor=Constructor((Field("supply", BALANCE), Field("decimals", U32)), STRING),
    )
    fields.update(overrides)
    return Interface(**fields)


def make_account(seed: int = 1, balance: int = 10, tags: list[str] | None = None) -> dict:
    return {
        "owner": make_address(seed),
        "balance": balance,
        "tags": tags if tags is not None else ["main"],
    }
