import json
import logging
import zlib
from collections.abc import Iterable
from pathlib import Path

import yaml

from idlwire.core.errors import DocumentError
from idlwire.core.models.schema import Interface

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")
PACKED_SUFFIXES = (".idl",)

logger = logging.getLogger("infra.document")


def pack_interface(interface: Interface) -> bytes:
    """
    Packed form of an interface: its JSON document compressed with raw
    deflate (no zlib header), suitable for embedding next to a build
    artifact.
    """
    raw = json.dumps(interface.to_dict(), separators=(",", ":")).encode()
    compressor = zlib.compressobj(level=9, wbits=-15)
    return compressor.compress(raw) + compressor.flush()


def unpack_interface(data: bytes) -> Interface:
    try:
        raw = zlib.decompress(data, wbits=-15)
        document = json.loads(raw)
    except (zlib.error, ValueError) as ex:
        raise DocumentError(f"Invalid packed interface: {ex}") from ex
    return Interface.from_dict(document)


def load_document(path: str | Path) -> Interface:
    """
    Read an interface document. The format follows the file suffix:
    .json, .yaml/.yml or .idl (packed).
    """
    file = Path(path)
    if not file.is_file():
        raise DocumentError(f"Interface document not found: {file}")

    suffix = file.suffix.lower()
    try:
        if suffix in PACKED_SUFFIXES:
            interface = unpack_interface(file.read_bytes())
        elif suffix in JSON_SUFFIXES:
            interface = Interface.from_dict(json.loads(file.read_text()))
        elif suffix in YAML_SUFFIXES:
            interface = Interface.from_dict(yaml.safe_load(file.read_text()))
        else:
            raise DocumentError(f"Unsupported interface document format: {file.name}")
    except (json.JSONDecodeError, yaml.YAMLError) as ex:
        raise DocumentError(f"Cannot parse {file}: {ex}") from ex

    logger.debug(f"Loaded interface '{interface.name}' from {file}")
    return interface


def dump_document(interface: Interface, path: str | Path) -> Path:
    file = Path(path)
    suffix = file.suffix.lower()

    if suffix in PACKED_SUFFIXES:
        file.write_bytes(pack_interface(interface))
    elif suffix in JSON_SUFFIXES:
        file.write_text(json.dumps(interface.to_dict(), indent=2))
    elif suffix in YAML_SUFFIXES:
        file.write_text(yaml.safe_dump(interface.to_dict(), sort_keys=False))
    else:
        raise DocumentError(f"Unsupported interface document format: {file.name}")

    return file


def load_library(paths: Iterable[str | Path]) -> dict[str, Interface]:
    """
    Load every interface document found in the given files or directories
    and key them by interface name. Two documents declaring the same
    interface name are rejected.
    """
    library: dict[str, Interface] = {}
    origins: dict[str, Path] = {}
    suffixes = JSON_SUFFIXES + YAML_SUFFIXES + PACKED_SUFFIXES

    for entry in paths:
        entry = Path(entry)
        if entry.is_dir():
            files = sorted(p for p in entry.iterdir() if p.suffix.lower() in suffixes)
        else:
            files = [entry]

        for file in files:
            interface = load_document(file)
            if interface.name in library:
                raise DocumentError(
                    f"Interface '{interface.name}' is declared by both {origins[interface.name]} and {file}"
                )
            library[interface.name] = interface
            origins[interface.name] = file

    logger.info(f"Interface library holds {len(library)} interfaces")
    return library
