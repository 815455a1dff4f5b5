"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .outputs import DotenvOutputs, MemoryOutputs, OutputSink

__all__ = [
    "ConsoleProtocol",
    "DotenvOutputs",
    "MemoryOutputs",
    "MockConsole",
    "OutputSink",
    "RichConsole",
    "Style",
]
