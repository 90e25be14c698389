import argparse
import os
from functools import lru_cache
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idlwire",
        description=(
            "Validate RPC interface documents and inspect their wire encoding.\n\n"
            "idlwire checks interface definitions for consistency and maps typed "
            "values to and from a canonical MessagePack encoding."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to an idlwire configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n"
            "Overrides the log_level configuration entry (default INFO).\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate an interface document")
    check.add_argument("document", type=str, help="Interface document (.json, .yaml, .idl)")

    pack = sub.add_parser("pack", help="Write the packed (.idl) form of an interface document")
    pack.add_argument("document", type=str, help="Interface document (.json, .yaml, .idl)")
    pack.add_argument("output", type=str, help="Destination file")

    decode = sub.add_parser("decode", help="Decode wire bytes as a declared type")
    decode.add_argument("document", type=str, help="Interface document (.json, .yaml, .idl)")
    decode.add_argument("type_name", type=str, help="Name of a type declared by the interface")
    decode.add_argument("hex", type=str, help="Wire bytes, hex encoded")

    return parser


@lru_cache
def get_cli_args() -> argparse.Namespace:
    return build_parser().parse_args()


@lru_cache
def get_configfile() -> Path | None:
    args = get_cli_args()

    # Priority: CLI > ENV > default file in current working directory
    raw = args.config or os.getenv("IDLWIRECONFIG")

    if raw is None:
        file = Path.cwd() / "idlwire.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the IDLWIRECONFIG environment variable\n"
            "  - Or place an 'idlwire.yaml' file in the current working directory."
        )

    return file
