"""Job outputs consumed by later CI stages.

Outputs are JSON-encoded values. ``DotenvOutputs`` writes them as
``KEY=value`` lines so GitLab can load the file through
``artifacts:reports:dotenv``; every value is also echoed to the console.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from changesets_gitlab.output.console import ConsoleProtocol, Style
from changesets_gitlab.platform.files import atomic_write_text

__all__ = ["OutputSink", "DotenvOutputs", "MemoryOutputs", "encode_value"]


def encode_value(value: object) -> str:
    return json.dumps(value, separators=(",", ":"))


@runtime_checkable
class OutputSink(Protocol):
    def set_output(self, name: str, value: object) -> None: ...


class DotenvOutputs:
    """Output sink writing a dotenv report file.

    Attributes:
        path: Dotenv file to (re)write, or None to only echo values
    """

    def __init__(self, path: Path | None, console: ConsoleProtocol) -> None:
        self.path = path
        self._console = console
        self._values: dict[str, str] = {}

    def set_output(self, name: str, value: object) -> None:
        encoded = encode_value(value)
        self._values[name] = encoded
        self._console.print(f"output {name}={encoded}", Style.DIM)
        if self.path is not None:
            lines = [f"{key}={val}" for key, val in self._values.items()]
            atomic_write_text(self.path, "\n".join(lines) + "\n")


class MemoryOutputs:
    """Output sink that keeps decoded values for tests.

    ``calls`` counts writes per name so tests can check each output is set
    exactly once.
    """

    def __init__(self) -> None:
        self.values: dict[str, object] = {}
        self.calls: dict[str, int] = {}

    def set_output(self, name: str, value: object) -> None:
        # Round-trip through JSON so tests see what consumers see.
        self.values[name] = json.loads(encode_value(value))
        self.calls[name] = self.calls.get(name, 0) + 1
