import argparse

from idlwire.bootstrap.config.settings import IdlwireConfig
from idlwire.bootstrap.deps import get_dispatcher, get_library
from idlwire.bootstrap.dispatcher import CommandResult
from idlwire.core.errors import InterfaceValidationError
from idlwire.core.schema.validator import load_registry
from idlwire.infra.document import load_document

dispatcher = get_dispatcher()


@dispatcher.command("check")
def cmd_check(config: IdlwireConfig, namespace: argparse.Namespace) -> CommandResult:
    interface = load_document(namespace.document)
    library = get_library(config)

    try:
        registry = load_registry(interface, library)
    except InterfaceValidationError as ex:
        return CommandResult(
            status="error",
            data={
                "interface": interface.name,
                "errors": [f"{type(err).__name__}: {err}" for err in ex.errors]
            }
        )

    return CommandResult(
        status="ok",
        data={
            "interface": interface.name,
            "version": interface.version,
            "build_version": interface.build_version or None,
            "types": [typedef.name for typedef in registry],
            "functions": [fn.name for fn in interface.functions],
            "imports": [r.name for r in registry.imports]
        }
    )
