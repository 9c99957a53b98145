"""Marker recognizers.

Three conventions tie the analyzed code to the immutableGen generator:

    template marker   a type declaration named with the template prefix
                      (``type _Imm_MyList []int``)
    skip-file marker  a ``//immutableVet:skipFile`` comment anywhere in a file
    provenance        files written by the generator are named
                      ``gen_<name>_immutableGen.go`` or start with the
                      ``// Code generated by immutableGen. DO NOT EDIT.`` header

Comments are not part of the facts document; they are read back from the
source files with tree-sitter.

Usage:
    markers = SourceMarkers(config)
    if markers.is_skip_file(path):
        ...
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol

import tree_sitter_go
from tree_sitter import Language, Parser

from ..config import VetConfig
from ..exceptions import FileAccessError
from ..logging_config import get_logger
from ..model.syntax import TypeSpec

logger = get_logger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())


class MarkerRecognizer(Protocol):
    """What the analysis asks about markers."""

    def template_name(self, spec: TypeSpec) -> Optional[str]:
        """Name of the immutable type a template declares, None if not a template."""
        ...

    def is_skip_file(self, path: str) -> bool: ...

    def is_generated(self, path: str) -> bool: ...


class GoCommentReader:
    """Tree-sitter parser that extracts comments from Go source."""

    def __init__(self) -> None:
        self._parser = Parser(GO_LANGUAGE)

    def parse(self, code: bytes) -> Any:
        return self._parser.parse(code)

    def comments(self, code: bytes) -> list[str]:
        """Text of every comment, in source order."""
        tree = self.parse(code)
        result: list[str] = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == "comment":
                if node.text:
                    result.append(node.text.decode("utf-8", errors="replace"))
                continue
            stack.extend(reversed(node.children))
        return result

    def leading_comments(self, code: bytes) -> list[str]:
        """Comments before the package clause."""
        tree = self.parse(code)
        result: list[str] = []
        for node in tree.root_node.children:
            if node.type != "comment":
                break
            if node.text:
                result.append(node.text.decode("utf-8", errors="replace"))
        return result


class SourceMarkers:
    """Marker recognizer reading comments from the files on disk."""

    def __init__(self, config: VetConfig, reader: Optional[GoCommentReader] = None):
        self.config = config
        self._reader = reader or GoCommentReader()
        self._sources: dict[str, bytes] = {}

    def template_name(self, spec: TypeSpec) -> Optional[str]:
        name = spec.name.name
        if not name.startswith(self.config.template_prefix):
            return None
        return name[len(self.config.template_prefix):]

    def is_skip_file(self, path: str) -> bool:
        marker = self.config.skip_file_comment
        return any(c.rstrip() == marker for c in self._reader.comments(self._read(path)))

    def is_generated(self, path: str) -> bool:
        if is_generated_name(path, self.config.generator_name):
            return True
        header = self.config.generated_file_header
        return any(c.rstrip() == header for c in self._reader.leading_comments(self._read(path)))

    def _read(self, path: str) -> bytes:
        if path not in self._sources:
            try:
                self._sources[path] = Path(path).read_bytes()
            except OSError as e:
                raise FileAccessError(Path(path), str(e))
            logger.debug(f"read {len(self._sources[path])} bytes from {path}")
        return self._sources[path]


def is_generated_name(path: str, generator: str) -> bool:
    """True if the base name follows the ``gen_<name>_<generator>.go`` convention."""
    name = Path(path).name
    return name.startswith("gen_") and name.endswith(f"_{generator}.go")
