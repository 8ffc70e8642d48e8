"""Parser registry mapping file extensions to format parsers."""
from __future__ import annotations

from typing import Callable, Dict, Iterator, List

from .formats import FileType, ParserCallable, ParserDefinition


class UnsupportedFormatError(LookupError):
    """Raised when no parser is registered for a file extension."""


def normalize_extension(extension: str) -> str:
    text = (extension or "").strip().lower()
    if text and not text.startswith("."):
        text = f".{text}"
    return text


class ParserRegistry:
    """Keeps track of the available format parsers."""

    def __init__(self) -> None:
        self._parsers: Dict[FileType, ParserDefinition] = {}
        self._extensions: Dict[str, FileType] = {}

    def register(
        self,
        file_type: FileType,
        parser: ParserCallable,
        extensions: tuple[str, ...],
        description: str = "",
    ) -> ParserCallable:
        """Register *parser* for *file_type* and return it for decorator usage."""

        if file_type in self._parsers:
            raise ValueError(f"Parser for '{file_type.value}' is already registered")
        normalized = tuple(normalize_extension(ext) for ext in extensions)
        taken = [ext for ext in normalized if ext in self._extensions]
        if taken:
            raise ValueError(f"Extensions already registered: {', '.join(taken)}")
        self._parsers[file_type] = ParserDefinition(
            file_type=file_type,
            parser=parser,
            extensions=normalized,
            description=description,
            module=getattr(parser, "__module__", ""),
        )
        for ext in normalized:
            self._extensions[ext] = file_type
        return parser

    def resolve(self, extension: str) -> ParserDefinition:
        """Return the parser definition handling *extension* (case-insensitive)."""

        normalized = normalize_extension(extension)
        try:
            return self._parsers[self._extensions[normalized]]
        except KeyError as exc:
            raise UnsupportedFormatError(f"Unsupported file type: {extension!r}") from exc

    def __contains__(self, extension: str) -> bool:
        return normalize_extension(extension) in self._extensions

    def __iter__(self) -> Iterator[ParserDefinition]:
        return iter(self._parsers.values())

    def extensions(self) -> List[str]:
        """Return registered extensions preserving registration order."""

        return list(self._extensions.keys())


registry = ParserRegistry()


def register_parser(
    file_type: FileType, *extensions: str, description: str = ""
) -> Callable[[ParserCallable], ParserCallable]:
    """Decorator to register a parser when defining the function."""

    def decorator(func: ParserCallable) -> ParserCallable:
        return registry.register(file_type, func, extensions, description=description)

    return decorator
