"""Options and query parsing for the gNMI command line client."""

from __future__ import annotations

import argparse
import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence


class QueryError(ValueError):
    """Raised for invalid gNMI client options or queries."""


class QueryType(Enum):
    """Kind of subscription a query asks for."""

    UNKNOWN = "unknown"
    ONCE = "once"
    POLL = "polling"
    STREAM = "streaming"


_QUERY_TYPES = {
    "o": QueryType.ONCE,
    "once": QueryType.ONCE,
    "ONCE": QueryType.ONCE,
    "p": QueryType.POLL,
    "polling": QueryType.POLL,
    "POLLING": QueryType.POLL,
    "s": QueryType.STREAM,
    "streaming": QueryType.STREAM,
    "STREAMING": QueryType.STREAM,
}


def query_type(name: str) -> QueryType:
    """Map a query type name or abbreviation to a QueryType."""
    return _QUERY_TYPES.get(name, QueryType.UNKNOWN)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def parse_query(query: str, delim: str) -> list[str]:
    """Split a query path on a delimiter, keeping bracketed keys intact."""
    if len(delim) != 1:
        raise QueryError(f"delimiter must be single UTF-8 codepoint: {_quote(delim)}")
    query = query.strip(delim)
    segments: list[str] = []
    current: list[str] = []
    in_key = False
    for ch in query:
        if ch == "[":
            if in_key:
                raise QueryError(f"malformed query, nested '[': {_quote(query)} ")
            in_key = True
        elif ch == "]":
            if not in_key:
                raise QueryError(f"malformed query, unmatched ']': {_quote(query)}")
            in_key = False
        elif ch == delim and not in_key:
            segments.append("".join(current))
            current = []
            continue
        current.append(ch)
    if in_key:
        raise QueryError(f"malformed query, missing trailing ']': {_quote(query)}")
    segments.append("".join(current))
    return segments


@dataclass
class GnmiOptions:
    """Settings of one gNMI client run."""

    address: list[str] = field(default_factory=list)
    query: list[str] = field(default_factory=list)
    client_types: list[str] = field(default_factory=lambda: ["gnmi"])
    query_type: str = QueryType.ONCE.value
    proto: str = ""
    encoding: str = "JSON|PROTO"
    tls_disabled: bool = False
    capabilities_request: bool = False
    get_request: bool = False
    set_request: bool = False
    with_user_pass: bool = False
    ca_crt: str = ""
    client_crt: str = ""
    client_key: str = ""
    auth_header: str = ""
    updates_only: bool = False
    polling_interval: float = 30.0
    count: int = 0
    delimiter: str = "/"
    streaming_duration: float = 0.0
    display_prefix: str = ""
    display_indent: str = "  "
    display_type: str = "group"
    target: str = ""
    timeout: float = 30.0
    timestamp: str = ""
    display_size: bool = False
    latency: bool = False
    server_name: str = ""
    insecure: bool = False

    def queries(self) -> list[list[str]]:
        """Validate the query type and parse every query into path elements."""
        if query_type(self.query_type) is QueryType.UNKNOWN:
            raise QueryError("--query_type must be one of: (o, once, p, polling, s, streaming)")
        if not self.query:
            raise QueryError("--query must be set")
        parsed = []
        for path in self.query:
            try:
                parsed.append(parse_query(path, self.delimiter))
            except QueryError as exc:
                raise QueryError(f"invalid query {_quote(path)} : {exc}") from exc
        return parsed

    def request_encoding(self) -> str:
        """Encoding to request from the target: JSON or PROTO."""
        if self.encoding in ("JSON", "PROTO"):
            return self.encoding
        raise QueryError(f"gnmi_cli does not support {self.encoding}")


_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def _parse_uint(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid unsigned value {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"invalid unsigned value {text!r}")
    return value


_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _parse_duration(text: str) -> float:
    """Parse a duration such as 30s or 1m30s into seconds."""
    body = text
    sign = 1.0
    if body[:1] in ("+", "-"):
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]
    if body == "0":
        return 0.0
    if not body:
        raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
    total = 0.0
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total


class _ListAction(argparse.Action):
    """Collects comma separated values across repeated flags."""

    def __call__(self, parser, namespace, values, option_string=None):
        current = getattr(namespace, self.dest) or []
        setattr(namespace, self.dest, current + values.split(","))


def _names(*names: str) -> list[str]:
    return [prefix + name for name in names for prefix in ("-", "--")]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gnmi_cli", allow_abbrev=False, description="gNMI command line client."
    )

    def add_bool(names, dest, help_text):
        parser.add_argument(
            *_names(*names), dest=dest, nargs="?", const=True, default=False,
            type=_parse_bool, help=help_text,
        )

    def add_list(names, dest, help_text):
        parser.add_argument(*_names(*names), dest=dest, action=_ListAction, default=None,
                            help=help_text)

    def add_value(names, dest, default, help_text, kind=str):
        parser.add_argument(*_names(*names), dest=dest, default=default, type=kind,
                            help=help_text)

    add_list(("client_types",), "client_types", "List of explicit client types to attempt, one of: gnmi.")
    add_list(("query", "q"), "query", "Comma separated list of queries.")
    add_list(("address", "a"), "address", "Address of the GNMI target to query.")
    add_value(("query_type", "qt"), "query_type", QueryType.ONCE.value,
              "Type of result, one of: (o, once, p, polling, s, streaming).")
    add_value(("proto", "p"), "proto", "", "Text proto for gNMI request.")
    add_value(("encodingType", "en"), "encoding", "JSON|PROTO", "Request Encoding Type")
    add_bool(("tlsDisabled", "tls"), "tls_disabled",
             "When set, caCert, clientCert & clientKey will be ignored")
    add_bool(("capabilities",), "capabilities_request", "Perform a Capabilities request.")
    add_bool(("get",), "get_request", "Perform a Get request.")
    add_bool(("set",), "set_request", "Perform a Set request.")
    add_bool(("with_user_pass",), "with_user_pass", "Prompt for username/password.")
    add_value(("ca_crt",), "ca_crt", "", "CA certificate file.")
    add_value(("client_crt",), "client_crt", "", "Client certificate file.")
    add_value(("client_key",), "client_key", "", "Client private key file.")
    add_value(("authheader", "ah"), "auth_header", "", "Authorization header.")
    add_bool(("updates_only", "u"), "updates_only", "Only stream updates, not the initial sync.")
    add_value(("polling_interval", "pi"), "polling_interval", 30.0,
              "Interval at which to poll if polling is specified.", _parse_duration)
    add_value(("count", "c"), "count", 0,
              "Number of polling/streaming events (0 is infinite).", _parse_uint)
    add_value(("delimiter", "d"), "delimiter", "/", "Delimiter between path nodes in query.")
    add_value(("streaming_duration", "sd"), "streaming_duration", 0.0,
              "Length of time to collect streaming queries (0 is infinite).", _parse_duration)
    add_value(("display_prefix",), "display_prefix", "", "Per output line prefix.")
    add_value(("display_indent",), "display_indent", "  ", "Per nesting-level indent.")
    add_value(("display_type", "dt"), "display_type", "group",
              "Display output type (g, group, s, single, p, proto).")
    add_value(("target", "t"), "target", "", "Name of the gNMI target.")
    add_value(("timeout",), "timeout", 30.0,
              "Terminate query if no RPC is established within the timeout.", _parse_duration)
    add_value(("timestamp", "ts"), "timestamp", "", "Timestamp formatting in output.")
    add_bool(("display_size", "ds"), "display_size", "Display the total size of query response.")
    add_bool(("latency", "l"), "latency", "Display the latency for receiving each update.")
    add_value(("server_name",), "server_name", "", "Hostname used to verify the server certificate.")
    add_bool(("insecure",), "insecure", "Do not verify the server certificate.")
    return parser


def parse_options(argv: Optional[Sequence[str]] = None) -> GnmiOptions:
    """Parse command line flags into validated GnmiOptions."""
    namespace = _build_parser().parse_args(argv)
    values = vars(namespace)
    for name in ("address", "query"):
        if values[name] is None:
            values[name] = []
    if values["client_types"] is None:
        values["client_types"] = ["gnmi"]
    options = GnmiOptions(**values)
    if not options.address:
        raise QueryError("--address must be set")
    if (options.client_crt or options.client_key) and not (options.client_crt and options.client_key):
        raise QueryError("--client_crt and --client_key must be set with file locations")
    return options