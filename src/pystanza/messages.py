"""Message sink used by the registry and the file codec.

Nothing in the configuration core prints or raises for expected failures.
Instead every informational, warning or error message is handed to a
:class:`MessageSink` and, for errors, appended to a human readable error
text that the application can show later (for example in a dialog after
several files failed to load).
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

logger = logging.getLogger("pystanza")
if os.environ.get("PYSTANZA_DEBUG") and not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


class MessageSink(Protocol):
    """Receiver for the messages emitted by the configuration core."""

    def info(self, msg: str) -> None:
        ...

    def warn(self, msg: str) -> None:
        ...

    def error(self, msg: str) -> None:
        ...

    def file_error(self, tag: str, path: str) -> None:
        ...


class LoggingSink:
    """Default sink routing everything to the ``pystanza`` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def info(self, msg: str) -> None:
        self.log.info("%s", msg)

    def warn(self, msg: str) -> None:
        self.log.warning("%s", msg)

    def error(self, msg: str) -> None:
        self.log.error("%s", msg)

    def file_error(self, tag: str, path: str) -> None:
        self.log.error("%s: %s", tag, path)


class Messages:
    """Sink wrapper that also accumulates error text.

    Consecutive duplicates are dropped so that a file failing the same way
    twice does not clutter the report.
    """

    def __init__(self, sink: MessageSink | None = None) -> None:
        self.sink: MessageSink = sink or LoggingSink()
        self._error_message = ""

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def is_error(self) -> bool:
        return bool(self._error_message)

    def clear(self) -> None:
        self._error_message = ""

    def append(self, msg: str) -> None:
        if not msg:
            self.clear()
            return
        if self._error_message == msg or self._error_message.endswith("\n" + msg):
            return
        if self._error_message:
            self._error_message += "\n"
        self._error_message += msg

    def info(self, msg: str) -> None:
        self.sink.info(msg)

    def warn(self, msg: str) -> None:
        self.sink.warn(msg)

    def error(self, msg: str) -> bool:
        """Report *msg* and remember it.  Always returns ``False``."""
        self.sink.error(msg)
        self.append(msg)
        return False

    def file_error(self, tag: str, path: str) -> bool:
        """Report a file problem and remember it.  Always returns ``False``."""
        self.sink.file_error(tag, path)
        self.append(f"{tag}: {path}")
        return False


__all__ = ["LoggingSink", "MessageSink", "Messages", "logger"]
