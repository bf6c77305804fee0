"""Reader for iRacing telemetry files stored on disk."""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any, BinaryIO

from .header import IRSDK_VER, DiskSubHeader, Header, VarHeader
from .session_info import parse_session_info
from .sim_state import SimState


def _read_exact(file: BinaryIO, size: int, what: str) -> bytes:
    if size < 0:
        raise ValueError(f"invalid size {size} for {what}")
    data = file.read(size)
    if len(data) != size:
        raise ValueError(f"unexpected end of file reading {what}")
    return data


class DiskClient:
    """Reads telemetry rows one after another from a telemetry file."""

    def __init__(
        self,
        file: BinaryIO,
        header: Header,
        sub_header: DiskSubHeader,
        variables: dict[str, VarHeader],
        session_info: Any,
    ) -> None:
        self._file = file
        self.header = header
        self.sub_header = sub_header
        self.variables = variables
        self.session_info = session_info

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> DiskClient:
        """Open a telemetry file and read its headers and session info."""
        file = open(path, "rb")
        try:
            header = Header.from_bytes(_read_exact(file, Header.SIZE, "header"))
            if header.ver != IRSDK_VER:
                raise ValueError(
                    f"iRacing SDK version mismatch: expected {IRSDK_VER}, received {header.ver}"
                )
            sub_header = DiskSubHeader.from_bytes(
                _read_exact(file, DiskSubHeader.SIZE, "sub header")
            )

            file.seek(header.session_info_offset)
            session_info = parse_session_info(
                _read_exact(file, header.session_info_len, "session info")
            )

            file.seek(header.var_header_offset)
            variables: dict[str, VarHeader] = {}
            for _ in range(header.num_vars):
                raw = file.read(VarHeader.SIZE)
                if len(raw) != VarHeader.SIZE:
                    continue
                try:
                    var = VarHeader.from_bytes(raw)
                except (ValueError, UnicodeDecodeError):
                    continue
                variables[var.name] = var

            file.seek(header.var_buf[0].buf_offset)
        except BaseException:
            file.close()
            raise
        return cls(file, header, sub_header, variables, session_info)

    @property
    def closed(self) -> bool:
        return self._file.closed

    def next_sim_state(self) -> SimState | None:
        """Read the next row; None once the file has no complete row left."""
        raw_data = self._file.read(self.header.buf_len)
        if len(raw_data) != self.header.buf_len:
            return None
        return SimState(self.header, self.variables, raw_data, self.session_info)

    def close(self) -> None:
        self._file.close()

    def __iter__(self) -> Iterator[SimState]:
        while (state := self.next_sim_state()) is not None:
            yield state

    def __enter__(self) -> DiskClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()