import argparse

from idlwire.bootstrap.config.settings import IdlwireConfig
from idlwire.bootstrap.deps import get_dispatcher, get_library, get_wire
from idlwire.bootstrap.dispatcher import CommandResult
from idlwire.core.errors import DecodeError
from idlwire.core.facade import WireCodec
from idlwire.core.models.types import Type
from idlwire.core.schema.validator import load_registry
from idlwire.infra.document import load_document

dispatcher = get_dispatcher()


@dispatcher.command("decode")
def cmd_decode(config: IdlwireConfig, namespace: argparse.Namespace) -> CommandResult:
    interface = load_document(namespace.document)
    registry = load_registry(interface, get_library(config))

    if namespace.type_name not in registry:
        raise ValueError(f"Interface '{interface.name}' declares no type '{namespace.type_name}'")

    try:
        data = bytes.fromhex(namespace.hex.removeprefix("0x"))
    except ValueError as ex:
        raise ValueError(f"Invalid hex input: {ex}") from ex

    codec = WireCodec(registry, get_wire())
    try:
        value = codec.decode(Type.defined(namespace.type_name), data)
    except DecodeError as ex:
        return CommandResult(
            status="error",
            data={"type": namespace.type_name, "error": type(ex).__name__, "reason": ex.reason, "path": ex.path}
        )

    return CommandResult(status="ok", data={"type": namespace.type_name, "value": value})
