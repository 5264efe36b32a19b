"""Console output helpers, exit codes and a column-aligning text writer."""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import Optional, TextIO


class ExitCode(IntEnum):
    """Process exit statuses used by the command line."""

    SUCCESS = 0
    ERROR = 1
    BAD_CONNECTION = 2
    BAD_ARGS = 128


class CliExit(SystemExit):
    """Raised to end the program with a given exit code."""

    def __init__(self, code: int = ExitCode.SUCCESS) -> None:
        super().__init__(int(code))


def _format(msg: str, args: tuple) -> str:
    return msg % args if args else msg


def output(msg: str, *args) -> None:
    """Write a printf-style message to standard output."""
    sys.stdout.write(_format(msg, args))


def exit_with_output(msg: str, *args) -> None:
    """Write a message to standard output and exit successfully."""
    sys.stdout.write(_format(msg, args))
    raise CliExit(ExitCode.SUCCESS)


def exit_with_success() -> None:
    """Exit successfully without any output."""
    raise CliExit(ExitCode.SUCCESS)


def exit_with_error(code: int, err) -> None:
    """Report an error on standard error and exit with the given code."""
    print("Error:", err, file=sys.stderr)
    raise CliExit(code)


def exit_with_error_message(msg: str, *args) -> None:
    """Write a message to standard error and exit with a general error."""
    sys.stderr.write(_format(msg, args))
    raise CliExit(ExitCode.ERROR)


def _html_width(text: str) -> int:
    """Visible width of text when HTML tags are hidden and entities count as one."""
    width = 0
    in_tag = False
    in_entity = False
    for ch in text:
        if in_tag:
            if ch == ">":
                in_tag = False
        elif in_entity:
            if ch == ";":
                in_entity = False
        elif ch == "<":
            in_tag = True
        elif ch == "&":
            in_entity = True
            width += 1
        else:
            width += 1
    return width


class TabWriter:
    """Buffers tab-separated cells and writes them as aligned columns.

    Cells are terminated by tabs; the last cell of a line is not part of
    any column. A line without tabs ends the current block of columns.
    """

    def __init__(
        self,
        out: Optional[TextIO] = None,
        *,
        min_width: int = 0,
        padding: int = 3,
        pad_char: str = " ",
        filter_html: bool = True,
    ) -> None:
        self._out = out
        self._min_width = min_width
        self._padding = padding
        self._pad_char = pad_char
        self._filter_html = filter_html
        self._lines: list[list[tuple[str, int]]] = [[]]
        self._cell: list[str] = []

    def __enter__(self) -> "TabWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.flush()

    def _width(self, text: str) -> int:
        return _html_width(text) if self._filter_html else len(text)

    def _terminate_cell(self) -> int:
        text = "".join(self._cell)
        self._cell = []
        line = self._lines[-1]
        line.append((text, self._width(text)))
        return len(line)

    def write(self, text: str) -> None:
        """Add text to the buffer."""
        for ch in text:
            if ch == "\t":
                self._terminate_cell()
            elif ch in "\n\f":
                cells = self._terminate_cell()
                self._lines.append([])
                if ch == "\f" or cells == 1:
                    self.flush()
            else:
                self._cell.append(ch)

    def flush(self) -> None:
        """Format everything buffered and write it out."""
        if self._cell:
            self._terminate_cell()
        out = self._out if self._out is not None else sys.stdout
        self._format(out, 0, len(self._lines), [])
        self._lines = [[]]
        self._cell = []

    def _format(self, out: TextIO, line0: int, line1: int, widths: list[int]) -> None:
        column = len(widths)
        current = line0
        while current < line1:
            if column >= len(self._lines[current]) - 1:
                current += 1
                continue
            self._write_lines(out, line0, current, widths)
            line0 = current
            width = self._min_width
            while current < line1:
                line = self._lines[current]
                if column >= len(line) - 1:
                    break
                width = max(width, line[column][1] + self._padding)
                current += 1
            self._format(out, line0, current, widths + [width])
            line0 = current
        self._write_lines(out, line0, line1, widths)

    def _write_lines(self, out: TextIO, line0: int, line1: int, widths: list[int]) -> None:
        for index in range(line0, line1):
            for column, (text, width) in enumerate(self._lines[index]):
                out.write(text)
                if column < len(widths):
                    out.write(self._pad_char * (widths[column] - width))
            if index + 1 != len(self._lines):
                out.write("\n")