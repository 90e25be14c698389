import json
from functools import lru_cache

from pydantic import ValidationError

from idlwire.bootstrap.config.settings import IdlwireConfig
from idlwire.bootstrap.dispatcher import CommandDispatcher
from idlwire.core.models.schema import Interface
from idlwire.infra.document import load_library
from idlwire.infra.format_renderer import YamlRenderer
from idlwire.infra.msgpack_wire import MsgPackWire


@lru_cache
def get_config() -> IdlwireConfig:
    try:
        return IdlwireConfig()
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


@lru_cache
def get_wire() -> MsgPackWire:
    config = get_config()
    return MsgPackWire(
        max_message_size=config.wire.max_message_size,
        max_depth=config.wire.max_depth
    )


@lru_cache
def get_renderer() -> YamlRenderer:
    return YamlRenderer()


@lru_cache
def get_dispatcher() -> CommandDispatcher:
    return CommandDispatcher()


def get_library(config: IdlwireConfig) -> dict[str, Interface]:
    return load_library(config.library.paths)
