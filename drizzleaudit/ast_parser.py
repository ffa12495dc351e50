"""AST parser for JavaScript/TypeScript sources using Tree-sitter."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from drizzleaudit.utils.logging import logger

EXTENSION_LANGUAGES = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
}

SUPPORTED_LANGUAGES = ("typescript", "tsx", "javascript")


@dataclass
class ParsedUnit:
    """One parsed compilation unit handed to the rule engine."""

    file_path: str
    language: str
    content: str
    tree: Any

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        return bool(self.tree.root_node.has_error)


class ASTParser:
    """Tree-sitter parser front end for the languages Drizzle schemas are written in."""

    def __init__(self):
        """Initialize parsers lazily; grammars are loaded on first use."""
        self.parsers = {}
        self.languages = {}

    def _get_parser(self, language: str) -> Any:
        if language in self.parsers:
            return self.parsers[language]

        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")

        try:
            from tree_sitter_language_pack import get_language, get_parser
        except ImportError as e:
            raise RuntimeError(
                f"tree-sitter-language-pack is not installed: {e}\n"
                "Please install with: pip install tree-sitter-language-pack"
            ) from e

        try:
            self.languages[language] = get_language(language)
            self.parsers[language] = get_parser(language)
        except Exception as e:
            raise RuntimeError(
                f"Failed to load tree-sitter grammar for {language}: {e}\n"
                "This is often due to a corrupted installation.\n"
                "Please try: pip install --force-reinstall tree-sitter-language-pack"
            ) from e

        logger.debug("Loaded tree-sitter grammar for {language}", language=language)
        return self.parsers[language]

    @staticmethod
    def detect_language(file_path: Path | str) -> str | None:
        """Map a file suffix to a grammar name, or None for unsupported files."""
        return EXTENSION_LANGUAGES.get(Path(file_path).suffix.lower())

    def parse_source(
        self, code: str, language: str = "typescript", file_path: str = "<memory>"
    ) -> ParsedUnit:
        """Parse source text into a ParsedUnit."""
        parser = self._get_parser(language)
        tree = parser.parse(code.encode("utf-8"))
        unit = ParsedUnit(file_path=file_path, language=language, content=code, tree=tree)
        if unit.has_errors:
            logger.debug("Syntax errors in {path}; analyzing recoverable nodes", path=file_path)
        return unit

    def parse_file(self, file_path: Path | str, language: str | None = None) -> ParsedUnit:
        """Read and parse a file. Raises OSError/UnicodeDecodeError for unreadable files."""
        path = Path(file_path)
        if language is None:
            language = self.detect_language(path)
        if language is None:
            raise ValueError(f"Cannot detect language for {path}")

        with open(path, encoding="utf-8") as f:
            content = f.read()

        return self.parse_source(content, language=language, file_path=str(path))
