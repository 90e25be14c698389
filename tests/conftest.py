import json

import pytest
import yaml

from idlwire.core.facade import WireCodec
from idlwire.core.schema.registry import SchemaRegistry
from idlwire.core.schema.validator import load_registry
from idlwire.infra.msgpack_wire import MsgPackWire
from tests.utils import make_ledger, make_tokens


@pytest.fixture
def wire() -> MsgPackWire:
    return MsgPackWire()


@pytest.fixture
def tokens():
    return make_tokens()


@pytest.fixture
def ledger():
    return make_ledger()


@pytest.fixture
def library(tokens):
    return {tokens.name: tokens}


@pytest.fixture
def registry(ledger, library) -> SchemaRegistry:
    return load_registry(ledger, library)


@pytest.fixture
def codec(registry, wire) -> WireCodec:
    return WireCodec(registry, wire)


@pytest.fixture
def library_dir(tmp_path, tokens):
    base = tmp_path / "library"
    base.mkdir()
    (base / "tokens.json").write_text(json.dumps(tokens.to_dict()))
    return base


@pytest.fixture
def config_file(tmp_path, library_dir):
    file = tmp_path / "idlwire.yaml"
    data = {
        "log_level": "DEBUG",
        "wire": {
            "max_message_size": 4096,
            "max_depth": 32,
        },
        "library": {
            "paths": [str(library_dir)]
        }
    }
    file.write_text(yaml.dump(data))
    return file
