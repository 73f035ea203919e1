"""Logging filters for stream routing."""

import logging


class StreamRoutingFilter(logging.Filter):
    """Route records to stdout or stderr by level.

    Progress messages (below WARNING) belong on stdout; warnings and errors
    belong on stderr.

    Parameters
    ----------
    stream : str
        Either ``"stdout"`` or ``"stderr"``
    """

    def __init__(self, stream: str) -> None:
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"Unknown stream: {stream}")
        super().__init__()
        self.stream = stream

    def filter(self, record: logging.LogRecord) -> bool:
        if self.stream == "stdout":
            return record.levelno < logging.WARNING
        return record.levelno >= logging.WARNING
