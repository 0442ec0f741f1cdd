"""Terminal output for shopcache: attributes on stdout, diagnostics on stderr.

Shop attributes (or a single attribute with ``--field``) are the only thing
ever written to stdout, so ``shopcache attributes`` can be piped into other
tools. Cache hits and misses, store warnings, and errors go to stderr.

Three renderings of the attribute mapping are supported:

* ``json`` -- the mapping as indented JSON.
* ``plain`` -- one ``name<TAB>value`` line per attribute; non-string values
  are written as compact JSON so ``true``/``null`` survive a round trip.
* ``rich`` -- a two-column table, used when stdout is a colour terminal.

Library code (the cache layer) reports through the module-level
:func:`debug` and :func:`warning` helpers, which delegate to the installed
:class:`OutputManager`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text


class OutputFormat(str, Enum):
    """How attributes are rendered on stdout.

    ``AUTO`` picks ``RICH`` on a colour TTY and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes shop data to stdout and cache diagnostics to stderr.

    Args:
        format: Rendering for :meth:`format_response`.
        no_color: Disable Rich markup on both streams.
        quiet: Drop ``info``, ``success`` and ``suggest`` messages.
        verbose: Show ``debug`` messages (cache hits, misses, requests).
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Write an attribute mapping, or a single attribute value, to stdout."""
        if self._format == OutputFormat.JSON:
            self._write(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            if isinstance(data, dict):
                for name, value in data.items():
                    self._write(f"{name}\t{_plain_value(value)}")
            else:
                self._write(_plain_value(data))
        elif isinstance(data, dict):
            self._stdout.print(_attribute_table(data))
        elif isinstance(data, list):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(_plain_value(data), markup=False)

    def _write(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # --- stderr ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic("", "", message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic("", "green", message)

    def warning(self, message: str) -> None:
        """Warnings are shown even with ``--quiet``."""
        self._diagnostic("Warning: ", "yellow", message)

    def error(self, message: str) -> None:
        self._diagnostic("Error: ", "bold red", message)

    def suggest(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic("→ ", "dim", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic("[debug] ", "dim", message)

    def _diagnostic(self, label: str, style: str, message: str) -> None:
        if self._no_color:
            print(f"{label}{message}", file=sys.stderr, flush=True)
            return
        line = escape(f"{label}{message}")
        self._stderr.print(f"[{style}]{line}[/{style}]" if style else line)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _plain_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _attribute_table(attributes: dict[str, Any]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Attribute", no_wrap=True)
    table.add_column("Value")
    for name in sorted(attributes):
        table.add_row(Text(name), Text(_plain_value(attributes[name])))
    return table


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
