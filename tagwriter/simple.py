"""Convenience layer for writing XML one tag at a time.

    with TagWriter(output="canon.xml") as xml:
        def canon():
            xml.do_tag("title", "Example")
            xml.do_tag("link", {"attr": [("href", "example.com")], "content": "text"})

        xml.do_tag("canon", canon)

``do_tag`` is the function that does all the real work. The second argument
decides what gets written:

* nothing, ``""``, ``None`` or ``0`` gives an empty tag, ``<name/>``;
* any other scalar gives ``<name>text</name>`` with the text escaped;
* a zero-argument callable opens the tag, runs the callable (which makes its
  own ``do_tag`` calls on the same writer) and closes the tag;
* an attribute record, ``{"attr": [...], "content": ...}`` or
  :func:`tagwriter.content.attributed`, adds attributes in the order given
  and then applies the rules above to its content.
"""

from __future__ import annotations

import weakref
from typing import Any, Optional, Tuple

from .content import Attribute, Attributed, Nested, Text, classify, is_truthy
from .io_utils import warn
from .models import WriterConfig
from .xml_writer import XmlWriter


def _teardown(writer: XmlWriter) -> None:
    try:
        writer.end()
    finally:
        writer.close()


def _teardown_unclosed(writer: XmlWriter) -> None:
    warn("[tagwriter] writer was not closed explicitly; finishing document on collection")
    _teardown(writer)


class TagWriter:
    """Write a single XML document through :meth:`do_tag` calls.

    Accepts a :class:`WriterConfig` and/or its fields as keyword arguments
    (keywords win). The encoding defaults to UTF-8, and UTF-8 documents get
    their XML declaration as soon as the writer is created.
    """

    def __init__(self, config: Optional[WriterConfig] = None, **options: Any) -> None:
        if config is None:
            config = WriterConfig.model_validate(options)
        elif options:
            config = WriterConfig.model_validate({**dict(config), **options})
        self.config = config
        self.writer = XmlWriter(
            output=config.output,
            encoding=config.encoding,
            data_mode=config.data_mode,
            data_indent=config.data_indent,
            unsafe=config.unsafe,
            close_output=config.close_output,
        )
        self._finalizer = weakref.finalize(self, _teardown_unclosed, self.writer)
        if config.is_utf8:
            self.writer.xml_decl("UTF-8")

    def __enter__(self) -> "TagWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.close()
            return False
        try:
            self.close()
        except Exception as teardown_error:
            warn(f"[tagwriter] teardown after {exc_type.__name__} failed: {teardown_error}")
        return False

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        """End the document and close the output. Later calls do nothing."""
        if self._finalizer.detach() is not None:
            _teardown(self.writer)

    def to_string(self) -> str:
        return self.writer.to_string()

    def do_tag(self, tag_name: str, content: Any = None) -> None:
        content = classify(content)
        attributes: Tuple[Attribute, ...] = ()
        if isinstance(content, Attributed):
            attributes = content.attributes
            content = content.inner

        if isinstance(content, Nested):
            self.writer.start_tag(tag_name, attributes)
            content.builder()
            self.writer.end_tag(tag_name)
        elif isinstance(content, Text):
            self.writer.data_element(tag_name, content.text, attributes)
        else:
            self.writer.empty_tag(tag_name, attributes)

    def do_tag_if(self, tag_name: str, content: Any) -> None:
        """Same as :meth:`do_tag`, but writes nothing for empty content."""
        if is_truthy(content):
            self.do_tag(tag_name, content)
