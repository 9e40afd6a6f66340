"""Wayland protocol XML descriptions as an in-memory model."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum as _StdEnum
from pathlib import Path
from typing import Iterable, TypeVar


class ArgType(_StdEnum):
    """Wire types an argument may have."""

    INT = "int"
    UINT = "uint"
    FIXED = "fixed"
    STRING = "string"
    OBJECT = "object"
    NEW_ID = "new_id"
    ARRAY = "array"
    FD = "fd"


@dataclass(frozen=True)
class Arg:
    """One argument of a request or event."""

    name: str
    type: ArgType
    summary: str | None = None
    interface: str | None = None
    allow_null: bool = False
    enum: str | None = None

    @property
    def is_generic_new_id(self) -> bool:
        """A new_id without a fixed interface, sent as (interface, version, id)."""
        return self.type is ArgType.NEW_ID and self.interface is None


@dataclass(frozen=True)
class Entry:
    """One named value of an enum."""

    name: str
    value: int
    summary: str | None = None
    since: int | None = None


@dataclass(frozen=True)
class Enum:
    """A protocol enum, possibly a bitfield."""

    name: str
    entries: tuple[Entry, ...] = ()
    since: int | None = None
    bitfield: bool = False

    def entry(self, name: str) -> Entry:
        return _find(self.entries, name, "entry")


@dataclass(frozen=True)
class Message:
    """A request or event; ``opcode`` is its position among its kind."""

    name: str
    opcode: int
    args: tuple[Arg, ...] = ()
    since: int | None = None
    destructor: bool = False
    summary: str | None = None

    @property
    def has_fds(self) -> bool:
        return any(arg.type is ArgType.FD for arg in self.args)


@dataclass(frozen=True)
class Interface:
    """An interface with its requests, events and enums."""

    name: str
    version: int
    requests: tuple[Message, ...] = ()
    events: tuple[Message, ...] = ()
    enums: tuple[Enum, ...] = ()
    summary: str | None = None

    def request(self, name: str) -> Message:
        return _find(self.requests, name, "request")

    def event(self, name: str) -> Message:
        return _find(self.events, name, "event")

    def request_opcode(self, name: str) -> int:
        return self.request(name).opcode


@dataclass(frozen=True)
class Protocol:
    """A parsed protocol file."""

    name: str
    interfaces: tuple[Interface, ...] = field(default_factory=tuple)

    def interface(self, name: str) -> Interface:
        return _find(self.interfaces, name, "interface")


_Named = TypeVar("_Named", Arg, Entry, Enum, Message, Interface)


def _find(items: Iterable[_Named], name: str, kind: str) -> _Named:
    for item in items:
        if item.name == name:
            return item
    raise KeyError(f"no {kind} named {name!r}")


def to_const_name(name: str) -> str:
    """Upper-case a protocol name, turning dashes into underscores."""
    return name.upper().replace("-", "_")


def to_pascal_case(name: str) -> str:
    """Turn ``snake_case`` into ``PascalCase``."""
    return "".join(word[:1].upper() + word[1:] for word in name.split("_"))


def _required(element: ET.Element, attr: str) -> str:
    value = element.get(attr)
    if value is None:
        raise ValueError(f"<{element.tag}> is missing the {attr!r} attribute")
    return value


def _optional_int(element: ET.Element, attr: str) -> int | None:
    value = element.get(attr)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"<{element.tag} {attr}={value!r}> is not an integer") from None


def _bool(element: ET.Element, attr: str) -> bool:
    value = element.get(attr)
    if value is None:
        return False
    if value not in ("true", "false"):
        raise ValueError(f"<{element.tag} {attr}={value!r}> is not a boolean")
    return value == "true"


def _entry_value(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        pass
    try:
        return int(text, 10)
    except ValueError:
        raise ValueError(f"enum value {text!r} is not an integer") from None


def _summary(element: ET.Element) -> str | None:
    description = element.find("description")
    return None if description is None else description.get("summary")


def _parse_arg(element: ET.Element) -> Arg:
    raw_type = _required(element, "type")
    try:
        arg_type = ArgType(raw_type)
    except ValueError:
        raise ValueError(f"unknown argument type {raw_type!r}") from None
    return Arg(
        name=_required(element, "name"),
        type=arg_type,
        summary=element.get("summary"),
        interface=element.get("interface"),
        allow_null=_bool(element, "allow-null"),
        enum=element.get("enum"),
    )


def _parse_message(element: ET.Element, opcode: int) -> Message:
    return Message(
        name=_required(element, "name"),
        opcode=opcode,
        args=tuple(_parse_arg(child) for child in element if child.tag == "arg"),
        since=_optional_int(element, "since"),
        destructor=element.get("type") == "destructor",
        summary=_summary(element),
    )


def _parse_enum(element: ET.Element) -> Enum:
    entries = tuple(
        Entry(
            name=_required(child, "name"),
            value=_entry_value(_required(child, "value")),
            summary=child.get("summary"),
            since=_optional_int(child, "since"),
        )
        for child in element
        if child.tag == "entry"
    )
    return Enum(
        name=_required(element, "name"),
        entries=entries,
        since=_optional_int(element, "since"),
        bitfield=_bool(element, "bitfield"),
    )


def _parse_interface(element: ET.Element) -> Interface:
    version = _optional_int(element, "version")
    if version is None:
        raise ValueError(f"interface {element.get('name')!r} has no version")
    requests: list[Message] = []
    events: list[Message] = []
    enums: list[Enum] = []
    for child in element:
        if child.tag == "request":
            requests.append(_parse_message(child, len(requests)))
        elif child.tag == "event":
            events.append(_parse_message(child, len(events)))
        elif child.tag == "enum":
            enums.append(_parse_enum(child))
    return Interface(
        name=_required(element, "name"),
        version=version,
        requests=tuple(requests),
        events=tuple(events),
        enums=tuple(enums),
        summary=_summary(element),
    )


def parse_protocol(text: str | bytes) -> Protocol:
    """Parse the XML text of a protocol description."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"malformed protocol XML: {exc}") from exc
    if root.tag != "protocol":
        raise ValueError(f"expected <protocol> root element, found <{root.tag}>")
    return Protocol(
        name=_required(root, "name"),
        interfaces=tuple(
            _parse_interface(child) for child in root if child.tag == "interface"
        ),
    )


def load_protocol(path: str | Path) -> Protocol:
    """Read and parse a protocol description file."""
    return parse_protocol(Path(path).read_bytes())