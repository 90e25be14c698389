import json
import zlib

import pytest
import yaml

from idlwire.core.errors import DocumentError
from idlwire.core.models.schema import Interface, type_from_dict, type_to_dict
from idlwire.core.models.types import U8, Type
from idlwire.core.schema.validator import load_registry
from idlwire.infra.document import (
    dump_document,
    load_document,
    load_library,
    pack_interface,
    unpack_interface,
)
from tests.utils import make_ledger


@pytest.mark.it
@pytest.mark.parametrize("suffix", [".json", ".yaml", ".yml", ".idl"])
def test_dump_and_load(tmp_path, ledger, suffix):
    file = dump_document(ledger, tmp_path / f"ledger{suffix}")

    assert load_document(file) == ledger


@pytest.mark.it
def test_packed_form_is_raw_deflate_json(ledger):
    packed = pack_interface(ledger)
    raw = zlib.decompress(packed, wbits=-15)

    assert json.loads(raw) == ledger.to_dict()
    assert unpack_interface(packed) == ledger


@pytest.mark.it
def test_unpack_garbage():
    with pytest.raises(DocumentError):
        unpack_interface(b"not deflate")


@pytest.mark.it
def test_document_layout(ledger):
    document = ledger.to_dict()

    assert document["name"] == "ledger"
    assert document["imports"] == [{"name": "tokens", "version": "0.3.1"}]
    assert document["functions"][1]["mutability"] == "mutable"
    event = document["type_defs"][2]
    assert event["type"] == "event"
    assert [f.get("indexed", False) for f in event["fields"]] == [True, True, False]


@pytest.mark.it
def test_type_documents_are_adjacently_tagged():
    ty = Type.map(Type.array(U8, 4), Type.defined("Token", "tokens"))

    assert type_to_dict(ty) == {
        "type": "map",
        "params": [
            {"type": "array", "params": [{"type": "u8"}, 4]},
            {"type": "defined", "params": {"type": "Token", "namespace": "tokens"}},
        ],
    }
    assert type_from_dict(type_to_dict(ty)) == ty


@pytest.mark.it
def test_handwritten_yaml_document(tmp_path):
    file = tmp_path / "mini.yaml"
    file.write_text(yaml.safe_dump({
        "name": "mini",
        "type_defs": [
            {"type": "enum", "name": "Color", "variants": ["Red", {"name": "Blue"}]},
        ],
        "functions": [
            {"name": "paint", "inputs": [{"name": "c", "type": "u8"}]},
        ],
    }))

    iface = load_document(file)

    assert iface.version == "0.0.0"
    assert iface.type_defs[0].variants == ("Red", "Blue")
    assert iface.functions[0].inputs[0].type == U8
    assert not iface.functions[0].mutating


@pytest.mark.it
@pytest.mark.parametrize("content", [
    "[1, 2]",
    '{"version": "1"}',
    '{"name": "x", "type_defs": [{"type": "union", "name": "U"}]}',
    '{"name": "x", "functions": [{"name": "f", "output": {"type": "u128"}}]}',
    '{"name": "x", "functions": [{"name": "f", "mutability": "pure"}]}',
    '{"name": "x", "type_defs": [{"type": "enum", "name": "E", "variants": [{"name": "A", "fields": [1]}]}]}',
    "{not json",
])
def test_invalid_documents(tmp_path, content):
    file = tmp_path / "bad.json"
    file.write_text(content)

    with pytest.raises(DocumentError):
        load_document(file)


@pytest.mark.it
def test_unsupported_suffix(tmp_path, ledger):
    with pytest.raises(DocumentError):
        dump_document(ledger, tmp_path / "ledger.toml")

    with pytest.raises(DocumentError):
        load_document(tmp_path / "missing.json")


@pytest.mark.it
def test_load_library_from_directory(library_dir, tmp_path, ledger):
    dump_document(ledger, library_dir / "ledger.idl")
    (library_dir / "notes.txt").write_text("ignored")

    library = load_library([library_dir])

    assert sorted(library) == ["ledger", "tokens"]
    assert isinstance(library["ledger"], Interface)


@pytest.mark.it
def test_load_library_rejects_duplicate_names(library_dir, tmp_path, tokens):
    other = dump_document(tokens, tmp_path / "tokens-copy.yaml")

    with pytest.raises(DocumentError):
        load_library([library_dir, other])


@pytest.mark.it
def test_loaded_library_validates(library_dir):
    library = load_library([library_dir])
    registry = load_registry(make_ledger(), library)

    assert registry.resolve(Type.defined("Token", "tokens")).name == "Token"


@pytest.mark.it
def test_build_version_is_carried(tmp_path):
    iface = Interface("stamped", version="2.0.0", build_version="0.1.0")

    assert load_document(dump_document(iface, tmp_path / "stamped.idl")).build_version == "0.1.0"
    assert "build_version" not in Interface("plain").to_dict()
