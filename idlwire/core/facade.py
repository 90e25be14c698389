from collections.abc import Mapping, Sequence
from typing import Any

from idlwire.core.codec.call import CallCodec
from idlwire.core.codec.decoder import Decoder
from idlwire.core.codec.encoder import Encoder
from idlwire.core.models.schema import Function
from idlwire.core.models.types import Type
from idlwire.core.ports.wire import WireFormat
from idlwire.core.schema.registry import SchemaRegistry


class WireCodec:
    """
    Encoding front door for one validated interface.

    Bundles the frozen SchemaRegistry with a WireFormat so callers do not
    have to thread both through every call. A WireCodec holds no mutable
    state and may be shared across threads.
    """
    def __init__(self, registry: SchemaRegistry, wire: WireFormat) -> None:
        if not registry.frozen:
            raise RuntimeError(f"Schema registry '{registry.name}' must be validated before use")
        self._registry = registry
        self._encoder = Encoder(wire, registry)
        self._decoder = Decoder(wire, registry)
        self._calls = CallCodec(registry, wire)

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def encode(self, ty: Type, value: Any) -> bytes:
        return self._encoder.encode(ty, value)

    def decode(self, ty: Type, data: bytes) -> Any:
        return self._decoder.decode(ty, data)

    def encode_call(self, method: str, args: Sequence[Any] | Mapping[str, Any] = ()) -> bytes:
        return self._calls.encode_call(method, args)

    def decode_call(self, data: bytes) -> tuple[Function, tuple[Any, ...]]:
        return self._calls.decode_call(data)

    def encode_output(self, method: str, value: Any) -> bytes:
        return self._calls.encode_output(method, value)

    def decode_output(self, method: str, data: bytes) -> Any:
        return self._calls.decode_output(method, data)

    def encode_deploy(self, args: Sequence[Any] | Mapping[str, Any] = ()) -> bytes:
        return self._calls.encode_deploy(args)

    def decode_deploy(self, data: bytes) -> tuple[Any, ...]:
        return self._calls.decode_deploy(data)

    def encode_deploy_error(self, error: Any) -> bytes:
        return self._calls.encode_deploy_error(error)

    def decode_deploy_error(self, data: bytes) -> Any:
        return self._calls.decode_deploy_error(data)
