"""Tree-Sitter Parsing Layer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tree_sitter import Tree

from . import constants


class ParserFactory(ABC):
    """Abstract factory for obtaining a language parser."""

    @abstractmethod
    def get_parser(self, language: str): ...


class TreeSitterParserFactory(ParserFactory):
    """Concrete factory that delegates to tree-sitter-language-pack."""

    def get_parser(self, language: str):
        import tree_sitter_language_pack as tslp

        return tslp.get_parser(language)


class JavaScriptParser:
    """Parses JavaScript source into a tree-sitter syntax tree.

    The underlying parser is obtained once per instance and reused for
    every call to :meth:`parse`.
    """

    def __init__(self, parser_factory: ParserFactory | None = None):
        self._factory = parser_factory or TreeSitterParserFactory()
        self._parser = None

    def parse(self, source: str | bytes) -> Tree:
        if self._parser is None:
            self._parser = self._factory.get_parser(constants.LANGUAGE)
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        return self._parser.parse(source_bytes)
