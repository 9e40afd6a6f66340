"""A client connection to a Wayland compositor over a Unix stream socket.

Outgoing messages are buffered until :meth:`Connection.flush`. Messages that
carry file descriptors flush the buffer first and are sent at once, with the
descriptors attached as ``SCM_RIGHTS`` ancillary data. Descriptors received
from the compositor are queued and handed out in order by
:meth:`Connection.pop_fd`.
"""

from __future__ import annotations

import array
import contextlib
import logging
import operator
import os
import socket
from collections import deque
from pathlib import Path
from typing import Iterable, Mapping

from . import wire

log = logging.getLogger(__name__)

MAX_FDS_PER_MESSAGE = 28
_FD_SIZE = array.array("i").itemsize


def resolve_socket_path(environ: Mapping[str, str] | None = None) -> Path:
    """Find the compositor socket from ``XDG_RUNTIME_DIR`` and ``WAYLAND_DISPLAY``.

    ``WAYLAND_DISPLAY`` defaults to ``wayland-0``; an absolute value is used as
    the path itself.
    """
    env = os.environ if environ is None else environ
    runtime_dir = env.get("XDG_RUNTIME_DIR")
    if runtime_dir is None:
        raise FileNotFoundError("XDG_RUNTIME_DIR not set")
    display = env.get("WAYLAND_DISPLAY", "wayland-0")
    if display.startswith("/"):
        return Path(display)
    return Path(runtime_dir) / display


class Connection:
    """A buffered message connection with file-descriptor passing."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._write_buf = bytearray()
        self._next_id = 2
        self._pending_fds: deque[int] = deque()

    @classmethod
    def connect(cls) -> "Connection":
        """Connect to the socket named by the environment."""
        path = resolve_socket_path()
        log.info("connecting to Wayland socket path=%s", path)
        return cls.connect_to(path)

    @classmethod
    def connect_to(cls, path: str | os.PathLike[str]) -> "Connection":
        """Connect to the compositor socket at ``path``."""
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(os.fspath(path))
        except BaseException:
            sock.close()
            raise
        return cls(sock)

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fileno(self) -> int:
        return self._sock.fileno()

    def alloc_id(self) -> int:
        """Return a fresh client object id; id 1 is the display."""
        object_id = self._next_id
        self._next_id += 1
        log.debug("allocated object id %d", object_id)
        return object_id

    def send_msg(self, object_id: int, opcode: int, args: bytes) -> None:
        """Queue a message without file descriptors."""
        self._write_buf += wire.encode_message(object_id, opcode, args)

    def flush(self) -> None:
        """Write every queued message to the socket."""
        if not self._write_buf:
            return
        self._sock.sendall(self._write_buf)
        log.debug("flushed %d bytes", len(self._write_buf))
        self._write_buf.clear()

    def send_msg_with_fds(
        self, object_id: int, opcode: int, args: bytes, fds: Iterable[int]
    ) -> None:
        """Flush the queue, then send one message carrying ``fds``.

        The connection takes ownership of the descriptors and closes them
        once they have been sent.
        """
        fd_list = [operator.index(fd) for fd in fds]
        try:
            self.flush()
            payload = wire.encode_message(object_id, opcode, args)
            ancillary = []
            if fd_list:
                ancillary.append(
                    (
                        socket.SOL_SOCKET,
                        socket.SCM_RIGHTS,
                        array.array("i", fd_list).tobytes(),
                    )
                )
            log.debug(
                "sendmsg object_id=%d opcode=%d bytes=%d fds=%d",
                object_id,
                opcode,
                len(payload),
                len(fd_list),
            )
            sent = self._sock.sendmsg([payload], ancillary)
            if sent < len(payload):
                self._sock.sendall(payload[sent:])
        finally:
            for fd in fd_list:
                with contextlib.suppress(OSError):
                    os.close(fd)

    def _collect_fds(self, ancdata: list[tuple[int, int, bytes]], flags: int) -> None:
        for level, kind, data in ancdata:
            if level == socket.SOL_SOCKET and kind == socket.SCM_RIGHTS:
                received = array.array("i")
                received.frombytes(data[: len(data) - len(data) % received.itemsize])
                self._pending_fds.extend(received)
        if flags & getattr(socket, "MSG_CTRUNC", 0):
            log.warning("ancillary data truncated; file descriptors were lost")

    def _recv_exact(self, count: int) -> bytes:
        chunks = []
        remaining = count
        space = socket.CMSG_SPACE(MAX_FDS_PER_MESSAGE * _FD_SIZE)
        while remaining:
            data, ancdata, flags, _addr = self._sock.recvmsg(remaining, space)
            self._collect_fds(ancdata, flags)
            if not data:
                raise ConnectionError("compositor closed the connection")
            chunks.append(data)
            remaining -= len(data)
        return b"".join(chunks)

    def recv_msg(self) -> tuple[int, int, bytes]:
        """Block until one message arrives; return ``(object_id, opcode, body)``."""
        object_id, opcode, total = wire.parse_header(self._recv_exact(wire.HEADER_SIZE))
        body = self._recv_exact(total - wire.HEADER_SIZE)
        log.debug("recvmsg object_id=%d opcode=%d bytes=%d", object_id, opcode, total)
        return object_id, opcode, body

    def try_recv_msg(self) -> tuple[int, int, bytes] | None:
        """Return the next message, or ``None`` at once if nothing is waiting."""
        try:
            self._sock.recv(1, socket.MSG_DONTWAIT | socket.MSG_PEEK)
        except BlockingIOError:
            return None
        return self.recv_msg()

    def pop_fd(self) -> int:
        """Take the oldest received file descriptor; the caller owns it."""
        try:
            return self._pending_fds.popleft()
        except IndexError:
            raise OSError("no file descriptor was received for this event") from None

    def close(self) -> None:
        """Close the socket and any received descriptors nobody took."""
        while self._pending_fds:
            with contextlib.suppress(OSError):
                os.close(self._pending_fds.popleft())
        self._sock.close()