import json
from collections.abc import Mapping
from typing import Any

import yaml

from idlwire.core.models.values import Address, Balance, Err, Ok
from idlwire.core.ports.render import Renderer


def normalize(obj: Any) -> Any:
    """
    Turn decoded values into plain data a text format can hold:
    addresses as 0x-prefixed hex, other bytes as hex, balances as int,
    results as single-key mappings and sets as sorted lists.
    """
    if isinstance(obj, Address):
        return str(obj)

    if isinstance(obj, (bytes, bytearray)):
        return obj.hex()

    if isinstance(obj, Balance):
        return int(obj)

    if isinstance(obj, Ok):
        return {"Ok": normalize(obj.value)}

    if isinstance(obj, Err):
        return {"Err": normalize(obj.error)}

    if isinstance(obj, Mapping):
        return {normalize_key(k): normalize(v) for k, v in obj.items()}

    if isinstance(obj, (set, frozenset)):
        return sorted((normalize(x) for x in obj), key=repr)

    if isinstance(obj, (list, tuple)):
        return [normalize(x) for x in obj]

    return obj


def normalize_key(key: Any) -> Any:
    value = normalize(key)
    if isinstance(value, list):
        return repr(tuple(value))
    return value


class JsonRenderer(Renderer):
    def render(self, data: dict) -> str:
        return json.dumps(normalize(data), indent=2, sort_keys=False)


class YamlRenderer(Renderer):
    def render(self, data: dict) -> str:
        return yaml.safe_dump(normalize(data), sort_keys=False)
