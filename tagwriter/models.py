"""Pydantic models for writer configuration and declarative documents."""

from __future__ import annotations

import codecs
import os
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .content import ContentError, normalize_attributes
from .io_utils import read_yaml

DEFAULT_ENCODING = "utf-8"


class WriterConfig(BaseModel):
    """Options understood by the XML writer."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    output: Any = Field(
        None,
        description=(
            "Destination path or open file object; leave empty to collect the "
            "document in memory."
        ),
    )
    encoding: str = Field(
        DEFAULT_ENCODING,
        description="Output encoding. UTF-8 output starts with an XML declaration.",
    )
    data_mode: bool = Field(
        False, description="Write one element per line instead of a single line."
    )
    data_indent: int = Field(
        0, ge=0, description="Spaces of indentation per nesting level in data mode."
    )
    unsafe: bool = Field(
        False, description="Skip well-formedness checks on names, attributes and text."
    )
    close_output: bool = Field(
        True,
        description=(
            "Close a caller-supplied file object at teardown. Paths opened by the "
            "writer are always closed."
        ),
    )

    @field_validator("output")
    @classmethod
    def _check_output(cls, value: Any) -> Any:
        if value is None or isinstance(value, (str, os.PathLike)):
            return value
        if not callable(getattr(value, "write", None)):
            raise ValueError("output must be a path or an object with a write() method")
        return value

    @field_validator("encoding", mode="before")
    @classmethod
    def _default_encoding(cls, value: Any) -> Any:
        if not value:
            return DEFAULT_ENCODING
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding: {value}") from exc
        return value

    @property
    def is_utf8(self) -> bool:
        return codecs.lookup(self.encoding).name == "utf-8"


def load_writer_config(path: Path) -> WriterConfig:
    data = read_yaml(path) or {}
    return WriterConfig.model_validate(data)


Scalar = Union[str, int, float, bool]


class TagNode(BaseModel):
    """Element in a declarative document tree."""

    tag: str = Field(..., description="Element name.")
    attr: List[Tuple[str, Scalar]] = Field(
        default_factory=list,
        description="Attributes in output order; a mapping or a list of pairs.",
    )
    text: Optional[Scalar] = Field(None, description="Text content of the element.")
    children: List["TagNode"] = Field(
        default_factory=list, description="Nested elements, in output order."
    )

    @field_validator("attr", mode="before")
    @classmethod
    def _normalize_attr(cls, value: Any) -> Any:
        try:
            return list(normalize_attributes(value))
        except ContentError as exc:
            raise ValueError(str(exc)) from exc

    @model_validator(mode="after")
    def _text_or_children(self) -> "TagNode":
        if self.text not in (None, "") and self.children:
            raise ValueError(f"<{self.tag}> cannot have both text and children")
        return self
