from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_core.core_schema import ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from idlwire.bootstrap.config.loader import get_configfile


class WireSettings(BaseModel):
    max_message_size: Annotated[
        int,
        Field(
            description=(
                "Maximum size in bytes of a single encoded value accepted by the decoder.\n"
                "Larger inputs are rejected as malformed before any parsing happens."
            ),
            default=1 * 1024 * 1024,
            gt=0
        )
    ]

    max_depth: Annotated[
        int,
        Field(
            description="Maximum nesting depth of a decoded wire value.",
            default=256,
            gt=0
        )
    ]


class LibrarySettings(BaseModel):
    paths: Annotated[
        list[Path],
        Field(
            description=(
                "Files or directories holding the interface documents that may be imported.\n"
                "Every document found is keyed by its interface name; imports are\n"
                "resolved against this set only."
            ),
            default_factory=list
        )
    ]

    @field_validator("paths")
    @classmethod
    def validate_paths(cls, v: list[Path], _: ValidationInfo) -> list[Path]:
        for path in v:
            if not path.exists():
                raise ValueError(f"Path {path} does not exist.")
        return v


class IdlwireConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IDLWIRE_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Logging verbosity used when the CLI does not override it.",
            default="INFO"
        )
    ]

    wire: Annotated[
        WireSettings,
        Field(
            description=(
                "Wire format limits.\n"
                "Bounds applied to untrusted input before it is decoded."
            ),
            default_factory=WireSettings
        )
    ]

    library: Annotated[
        LibrarySettings,
        Field(
            description=(
                "Interface library.\n"
                "Where imported interface documents are looked up."
            ),
            default_factory=LibrarySettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),
        )
