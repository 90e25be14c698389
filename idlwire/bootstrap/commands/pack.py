import argparse
import logging

from idlwire.bootstrap.config.settings import IdlwireConfig
from idlwire.bootstrap.deps import get_dispatcher, get_library
from idlwire.bootstrap.dispatcher import CommandResult
from idlwire.core.schema.validator import load_registry
from idlwire.infra.document import dump_document, load_document

dispatcher = get_dispatcher()
logger = logging.getLogger("bootstrap.commands.pack")


@dispatcher.command("pack")
def cmd_pack(config: IdlwireConfig, namespace: argparse.Namespace) -> CommandResult:
    interface = load_document(namespace.document)
    # refuse to pack an interface that does not validate
    load_registry(interface, get_library(config))
    file = dump_document(interface, namespace.output)
    logger.info(f"Packed interface '{interface.name}' into {file}")

    return CommandResult(
        status="ok",
        data={"interface": interface.name, "output": str(file), "size": file.stat().st_size}
    )
