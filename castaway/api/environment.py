"""
Game engine connection.

Provides a clean interface to the game engine's character-stream
protocol: every turn the engine sends the view window (row by row, centre
omitted) and the agent answers with a single action character.
"""

import logging
import socket
from typing import BinaryIO, Optional

from .models import Action
from .tiles import View

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when the connection to the game engine fails."""


class ConnectionClosed(TransportError):
    """Raised when the game engine closes the stream."""


class GameConnection:
    """
    Character-stream connection to the game engine.

    Example usage:
        with GameConnection("localhost", 31415) as conn:
            view = conn.read_view()
            conn.send_action(Action.FORWARD)
    """

    def __init__(
        self,
        host: str = "localhost",
        port: Optional[int] = None,
        timeout: Optional[float] = None,
        view_dist: int = 2,
    ):
        """
        Initialize the connection (call connect() or use as context manager).

        Args:
            host: Game engine host name
            port: Game engine TCP port
            timeout: Socket timeout in seconds (None blocks forever)
            view_dist: Radius of the view window
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.view_dist = view_dist

        self._socket: Optional[socket.socket] = None
        self._reader: Optional[BinaryIO] = None
        self._writer: Optional[BinaryIO] = None

        self.views_read = 0
        self.actions_sent = 0

    @classmethod
    def from_streams(cls, reader: BinaryIO, writer: BinaryIO, view_dist: int = 2) -> "GameConnection":
        """Wrap already-open binary streams instead of a socket."""
        conn = cls(view_dist=view_dist)
        conn._reader = reader
        conn._writer = writer
        return conn

    @property
    def view_chars(self) -> int:
        """Characters the engine sends per turn."""
        side = 2 * self.view_dist + 1
        return side * side - 1

    @property
    def is_open(self) -> bool:
        """Whether streams are attached."""
        return self._reader is not None and self._writer is not None

    def connect(self) -> None:
        """Open the TCP connection to the game engine."""
        if self.port is None:
            raise TransportError("No port configured for the game engine")

        try:
            self._socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            raise TransportError(f"Could not connect to {self.host}:{self.port}: {e}") from e

        self._reader = self._socket.makefile("rb")
        self._writer = self._socket.makefile("wb")
        logger.info(f"Connected to game engine at {self.host}:{self.port}")

    def close(self) -> None:
        """Close streams and socket."""
        for stream in (self._reader, self._writer):
            if stream is not None:
                try:
                    stream.close()
                except OSError as e:
                    logger.debug(f"Error closing stream: {e}")
        if self._socket is not None:
            self._socket.close()
            logger.info("Connection to game engine closed")

        self._reader = None
        self._writer = None
        self._socket = None

    def __enter__(self) -> "GameConnection":
        if not self.is_open:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def read_view(self) -> View:
        """
        Read one turn's view window.

        Returns:
            The parsed view

        Raises:
            ConnectionClosed: The engine closed the stream mid-view
            TransportError: The stream could not be read
        """
        if self._reader is None:
            raise TransportError("Connection is not open")

        expected = self.view_chars
        try:
            data = self._reader.read(expected)
        except OSError as e:
            raise TransportError(f"Failed reading view: {e}") from e

        if data is None or len(data) < expected:
            received = 0 if data is None else len(data)
            raise ConnectionClosed(f"Stream closed after {received} of {expected} view characters")

        self.views_read += 1
        return View.from_chars(data.decode("latin-1"), radius=self.view_dist)

    def send_action(self, action: Action) -> None:
        """
        Send one action character and flush.

        Raises:
            TransportError: The stream could not be written
        """
        if self._writer is None:
            raise TransportError("Connection is not open")

        try:
            self._writer.write(action.value.encode("ascii"))
            self._writer.flush()
        except OSError as e:
            raise TransportError(f"Failed sending action '{action.value}': {e}") from e

        self.actions_sent += 1
