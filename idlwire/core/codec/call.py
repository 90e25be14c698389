from collections.abc import Mapping, Sequence
from typing import Any

from idlwire.core.codec.decoder import Decoder
from idlwire.core.codec.encoder import Encoder
from idlwire.core.errors import ArityMismatch, MalformedWireValue, UnknownMethod
from idlwire.core.models.schema import Field, Function
from idlwire.core.ports.wire import WireFormat
from idlwire.core.schema.registry import SchemaRegistry


class CallCodec:
    """
    Encodes and decodes RPC payloads of one interface.

    A call travels as a two-entry map:

        {"method": <function name>, "payload": [<arg 1>, <arg 2>, ...]}

    where every argument is encoded under its declared input type. Function
    outputs travel bare (nil when the function declares none). Constructor
    arguments travel as a plain array.
    """
    def __init__(self, registry: SchemaRegistry, wire: WireFormat) -> None:
        self._registry = registry
        self._wire = wire
        self._encoder = Encoder(wire, registry)
        self._decoder = Decoder(wire, registry)

    def function(self, name: str) -> Function:
        fn = self._registry.interface.function(name)
        if fn is None:
            raise UnknownMethod(name, self._registry.name)
        return fn

    def encode_call(self, method: str, args: Sequence[Any] | Mapping[str, Any] = ()) -> bytes:
        """
        Arguments are given positionally or by input name.
        Raises UnknownMethod for undeclared functions.
        """
        fn = self.function(method)
        payload = self._lower_args(fn.inputs, args, method)
        return self._wire.pack({"method": fn.name, "payload": payload})

    def decode_call(self, data: bytes) -> tuple[Function, tuple[Any, ...]]:
        envelope = self._wire.unpack(data)
        if not isinstance(envelope, dict):
            raise MalformedWireValue("Call envelope must be a map")

        method = envelope.get("method")
        payload = envelope.get("payload")
        if not isinstance(method, str):
            raise MalformedWireValue("Call envelope lacks a string 'method'", "$.method")
        if not isinstance(payload, (tuple, list)):
            raise MalformedWireValue("Call envelope lacks an array 'payload'", "$.payload")

        fn = self.function(method)
        return fn, self._lift_args(fn.inputs, payload, method, "$.payload")

    def encode_output(self, method: str, value: Any) -> bytes:
        fn = self.function(method)
        if fn.output is None:
            return self._wire.pack(None)
        return self._encoder.encode(fn.output, value)

    def decode_output(self, method: str, data: bytes) -> Any:
        fn = self.function(method)
        if fn.output is None:
            tree = self._wire.unpack(data)
            if tree is not None:
                raise MalformedWireValue(f"'{method}' returns nothing, got wire {type(tree).__name__}")
            return None
        return self._decoder.decode(fn.output, data)

    def encode_deploy(self, args: Sequence[Any] | Mapping[str, Any] = ()) -> bytes:
        inputs = self._registry.interface.constructor.inputs
        return self._wire.pack(self._lower_args(inputs, args, "constructor"))

    def decode_deploy(self, data: bytes) -> tuple[Any, ...]:
        payload = self._wire.unpack(data)
        if not isinstance(payload, (tuple, list)):
            raise MalformedWireValue("Constructor payload must be an array")
        return self._lift_args(self._registry.interface.constructor.inputs, payload, "constructor", "$")

    def encode_deploy_error(self, error: Any) -> bytes:
        error_type = self._registry.interface.constructor.error
        if error_type is None:
            raise TypeError(f"Constructor of '{self._registry.name}' declares no error type")
        return self._encoder.encode(error_type, error)

    def decode_deploy_error(self, data: bytes) -> Any:
        error_type = self._registry.interface.constructor.error
        if error_type is None:
            raise TypeError(f"Constructor of '{self._registry.name}' declares no error type")
        return self._decoder.decode(error_type, data)

    def _lower_args(self, inputs: tuple[Field, ...], args: Sequence[Any] | Mapping[str, Any], method: str) -> list[Any]:
        if isinstance(args, Mapping):
            unknown = set(args) - {f.name for f in inputs}
            if unknown:
                raise TypeError(f"'{method}' got unexpected arguments: {sorted(unknown)}")
            missing = [f.name for f in inputs if f.name not in args]
            if missing:
                raise TypeError(f"'{method}' is missing arguments: {missing}")
            args = [args[f.name] for f in inputs]

        if len(args) != len(inputs):
            raise TypeError(f"'{method}' takes {len(inputs)} arguments, got {len(args)}")

        return [self._encoder.lower(f.type, arg, f"$.{f.name}") for f, arg in zip(inputs, args)]

    def _lift_args(self, inputs: tuple[Field, ...], payload: Sequence[Any], method: str, path: str) -> tuple[Any, ...]:
        if len(payload) != len(inputs):
            raise ArityMismatch(method, len(inputs), len(payload))
        return tuple(
            self._decoder.lift(f.type, node, f"{path}[{i}]")
            for i, (f, node) in enumerate(zip(inputs, payload))
        )
