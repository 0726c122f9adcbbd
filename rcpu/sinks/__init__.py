from .log_sink import LogSink
from .terminal import TerminalTable

__all__ = ["LogSink", "TerminalTable"]
