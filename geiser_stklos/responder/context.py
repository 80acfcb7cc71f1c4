from __future__ import annotations

import logging
from typing import Iterable, List, Optional, TextIO

from geiser_stklos.config import get_load_path

logger = logging.getLogger(__name__)


class ResponderContext:
    """Per-connection responder state: the load path and the protocol log.

    Created when a connection is set up and closed when it goes away.
    """

    def __init__(self, load_path: Iterable[str] | None = None, log_file: str | None = None):
        self.load_path: List[str] = list(load_path) if load_path is not None else get_load_path()
        self.log_file: Optional[str] = None
        self.log: Optional[TextIO] = None
        if log_file:
            self.start_logging(log_file)

    def start_logging(self, filename: str) -> None:
        """Open `filename` for appending and duplicate every exchange to it."""
        self._close_log()
        self.log = open(filename, "a", encoding="utf-8")
        self.log_file = filename
        logger.debug("protocol log at %s", filename)

    def log_exchange(self, request: str, reply: str) -> None:
        if self.log is None:
            return
        self.log.write(request.rstrip("\n") + "\n")
        self.log.flush()
        self.log.write(reply.rstrip("\n") + "\n\n")
        self.log.flush()

    def _close_log(self) -> None:
        if self.log is not None:
            self.log.close()
            self.log = None
            self.log_file = None

    def close(self) -> None:
        self._close_log()

    def __enter__(self) -> ResponderContext:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
