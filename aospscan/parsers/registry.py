"""
Parser Registry for aospscan.

Maps build-file suffixes to the parser that understands them:

    @ParserRegistry.register('.mk')
    class AndroidMkParser(MakefileParser):
        ...
"""

from typing import Callable, Dict, List, Optional, Type
from pathlib import Path
import logging

from .base import MakefileParser, ParserOptions

logger = logging.getLogger(__name__)


class ParserRegistry:
    """Central registry for build-file parsers"""

    _parsers: Dict[str, Type[MakefileParser]] = {}

    @classmethod
    def register(cls, *suffixes: str) -> Callable:
        """
        Decorator to register a parser for file suffixes.

        Args:
            *suffixes: File suffixes this parser handles (e.g. '.mk')

        Returns:
            Decorator function
        """
        def decorator(parser_class: Type[MakefileParser]) -> Type[MakefileParser]:
            for suffix in suffixes:
                cls._parsers[suffix.lower()] = parser_class
                logger.debug(f"Registered parser: {parser_class.__name__} for {suffix.lower()}")
            return parser_class
        return decorator

    @classmethod
    def get_parser_class(cls, path: str) -> Optional[Type[MakefileParser]]:
        return cls._parsers.get(Path(path).suffix.lower())

    @classmethod
    def get_parser(cls, path: str, options: Optional[ParserOptions] = None) -> Optional[MakefileParser]:
        """Instantiate the parser for path, or None for unknown build files."""
        parser_class = cls.get_parser_class(path)
        if parser_class is None:
            return None
        return parser_class(options)

    @classmethod
    def supported_suffixes(cls) -> List[str]:
        return sorted(cls._parsers)


def get_parser(path: str, options: Optional[ParserOptions] = None) -> Optional[MakefileParser]:
    """Factory function to get the parser for a build file"""
    return ParserRegistry.get_parser(path, options)
