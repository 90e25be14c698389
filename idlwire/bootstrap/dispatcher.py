import argparse
import logging
from dataclasses import dataclass, asdict
from typing import Any, Protocol

from idlwire.bootstrap.config.settings import IdlwireConfig


@dataclass
class CommandResult:
    """
    Outcome of a CLI command, rendered by the configured Renderer.
    """
    status: str
    """
    "ok" or "error"
    """

    data: dict[str, Any]
    """
    Command specific payload
    """

    @property
    def exit_code(self) -> int:
        return 0 if self.status == "ok" else 1

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CommandHandler(Protocol):
    def __call__(
        self,
        config: IdlwireConfig,
        namespace: argparse.Namespace,
    ) -> CommandResult:
        ...


class CommandDispatcher:
    """
    Registry of CLI commands keyed by sub-command name.

    Command modules register their handler at import time through the
    `command` decorator; the CLI entry point imports them with `scan`.
    """
    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}
        self._logger = logging.getLogger("bootstrap.dispatcher")

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)

    def dispatch(
        self,
        name: str,
        *,
        config: IdlwireConfig,
        namespace: argparse.Namespace
    ) -> CommandResult:
        handler = self._commands.get(name)
        if handler is None:
            raise RuntimeError(f"Unknown command '{name}', expected one of {self.commands}")

        self._logger.debug(f"Running command '{name}'")
        result = handler(config, namespace)
        self._logger.debug(f"Command '{name}' finished with status '{result.status}'")
        return result

    def command(self, name: str):
        def decorator(func: CommandHandler) -> CommandHandler:
            if name in self._commands:
                raise RuntimeError(f"Command '{name}' is already registered")
            self._commands[name] = func
            return func

        return decorator
