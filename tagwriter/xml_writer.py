"""Low-level XML emitter with an open-tag stack, built on XMLGenerator."""

from __future__ import annotations

import io
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterable, List, Sequence, Tuple, Union
from xml.sax.saxutils import XMLGenerator

from .io_utils import ensure_parent

Output = Union[None, str, os.PathLike, IO[Any]]
AttributePairs = Sequence[Tuple[str, Any]]

_NAME_START = (
    ":A-Z_a-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF"
    "\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF\uFDF0-\uFFFD"
    "\U00010000-\U000EFFFF"
)
_NAME_CHAR = _NAME_START + "\\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"
_NAME_RE = re.compile(f"[{_NAME_START}][{_NAME_CHAR}]*")
_ILLEGAL_CHARS_RE = re.compile(
    "[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


class XmlWriterError(ValueError):
    """Raised when a write would produce a malformed document."""


class _Generator(XMLGenerator):
    """XMLGenerator that can open an element without the short empty form."""

    def startOpenElement(self, name, attrs):
        self.startElement(name, attrs)
        self._finish_pending_start_element()


class _AttributeList:
    """Ordered attributes in the shape XMLGenerator.startElement reads."""

    def __init__(self, pairs: List[Tuple[str, str]]) -> None:
        self._pairs = pairs

    def items(self) -> List[Tuple[str, str]]:
        return self._pairs


@dataclass
class _OpenElement:
    name: str
    has_children: bool = False


class XmlWriter:
    """Write one XML document to a stream.

    ``output`` is a path (opened and owned by the writer), an open file
    object (text or binary), or ``None`` to collect the document in memory.
    Unless ``unsafe`` is set, every call is checked so that the result stays
    well-formed: names must be valid XML names, attributes must be unique,
    end tags must match, and only one root element may be written.
    """

    def __init__(
        self,
        output: Output = None,
        encoding: str = "utf-8",
        data_mode: bool = False,
        data_indent: int = 0,
        unsafe: bool = False,
        close_output: bool = True,
    ) -> None:
        self.encoding = encoding
        self.data_mode = data_mode
        self.data_indent = data_indent
        self.unsafe = unsafe

        self._owns_stream = True
        self._in_memory = output is None
        if output is None:
            self._stream: IO[Any] = io.StringIO()
        elif isinstance(output, (str, os.PathLike)):
            self._stream = ensure_parent(Path(output)).open("wb")
        else:
            self._stream = output
            self._owns_stream = close_output

        self._gen = _Generator(self._stream, encoding, short_empty_elements=True)
        self._stack: List[_OpenElement] = []
        self._has_decl = False
        self._has_root = False
        self._ended = False
        self._closed = False
        self._captured: str | None = None

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def has_root(self) -> bool:
        return self._has_root

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def closed(self) -> bool:
        return self._closed

    def xml_decl(self, encoding: str | None = None) -> None:
        """Write the XML declaration; only valid before the root element."""
        self._check_open()
        if not self.unsafe and (self._has_decl or self._has_root):
            raise XmlWriterError("XML declaration must be the first thing in the document")
        self._gen.processingInstruction(
            "xml", f'version="1.0" encoding="{encoding or self.encoding}"'
        )
        self._gen.ignorableWhitespace("\n")
        self._has_decl = True

    def start_tag(self, name: str, attributes: AttributePairs = ()) -> None:
        attrs = self._prepare_element(name, attributes)
        self._gen.startOpenElement(name, attrs)
        self._stack.append(_OpenElement(name))

    def end_tag(self, name: str | None = None) -> None:
        self._check_open()
        if not self._stack:
            raise XmlWriterError(f"end tag {name!r} with no open element")
        current = self._stack[-1]
        if name is not None and name != current.name and not self.unsafe:
            raise XmlWriterError(
                f"attempt to end element {name!r} while {current.name!r} is open"
            )
        if current.has_children:
            self._indent(len(self._stack) - 1)
        self._stack.pop()
        self._gen.endElement(current.name)

    def empty_tag(self, name: str, attributes: AttributePairs = ()) -> None:
        attrs = self._prepare_element(name, attributes)
        self._gen.startElement(name, attrs)
        self._gen.endElement(name)

    def data_element(self, name: str, text: Any, attributes: AttributePairs = ()) -> None:
        """Write ``<name ...>text</name>``; the text is escaped."""
        text = str(text)
        self._check_chars(text)
        attrs = self._prepare_element(name, attributes)
        self._gen.startElement(name, attrs)
        self._gen.characters(text)
        self._gen.endElement(name)

    def end(self) -> None:
        """Close every open element and finish the document.

        Calling it again after the document has ended does nothing.
        """
        if self._ended:
            return
        self._check_open()
        if not self._has_root and not self.unsafe:
            raise XmlWriterError("document ended with no root element")
        while self._stack:
            self.end_tag()
        self._gen.ignorableWhitespace("\n")
        self._gen.endDocument()
        self._ended = True

    def close(self) -> None:
        """Flush the output and close it if the writer owns it."""
        if self._closed:
            return
        self._closed = True
        if self._in_memory:
            self._captured = self._stream.getvalue()
        flush = getattr(self._stream, "flush", None)
        if flush is not None and not getattr(self._stream, "closed", False):
            flush()
        if self._owns_stream:
            self._stream.close()

    def to_string(self) -> str:
        if not self._in_memory:
            raise XmlWriterError("to_string() is only available for in-memory output")
        if self._captured is not None:
            return self._captured
        return self._stream.getvalue()

    def _check_open(self) -> None:
        if self._closed:
            raise XmlWriterError("writer is closed")
        if self._ended:
            raise XmlWriterError("document has already ended")

    def _check_name(self, name: Any, kind: str) -> None:
        if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
            raise XmlWriterError(f"invalid {kind} name: {name!r}")

    def _check_chars(self, value: str) -> None:
        if self.unsafe:
            return
        match = _ILLEGAL_CHARS_RE.search(value)
        if match:
            raise XmlWriterError(f"character {match.group()!r} is not allowed in XML")

    def _prepare_element(self, name: str, attributes: AttributePairs) -> _AttributeList:
        self._check_open()
        if not self.unsafe:
            self._check_name(name, "element")
            if not self._stack and self._has_root:
                raise XmlWriterError(
                    f"attempt to insert {name!r} after close of document element"
                )
        pairs = self._prepare_attributes(attributes)

        if self._stack:
            self._stack[-1].has_children = True
            self._indent(len(self._stack))
        self._has_root = True
        return _AttributeList(pairs)

    def _prepare_attributes(self, attributes: Iterable[Tuple[str, Any]]) -> List[Tuple[str, str]]:
        pairs: List[Tuple[str, str]] = []
        seen = set()
        for key, value in attributes:
            value = str(value)
            if not self.unsafe:
                self._check_name(key, "attribute")
                if key in seen:
                    raise XmlWriterError(f"two attributes named {key!r}")
                self._check_chars(value)
            seen.add(key)
            pairs.append((key, value))
        return pairs

    def _indent(self, level: int) -> None:
        if self.data_mode:
            self._gen.ignorableWhitespace("\n" + " " * (self.data_indent * level))
