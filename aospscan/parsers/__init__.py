"""
aospscan Parsers Package

Components:
- base: MakefileParser base class and ParserOptions
- registry: Suffix-based parser registration and lookup
- mk: Android.mk (GNU Make subset) parser
- bp: Android.bp (Blueprint) parser
"""

from .base import MakefileParser, ParserOptions
from .registry import ParserRegistry, get_parser
from .mk import AndroidMkParser
from .bp import AndroidBpParser, blueprint_to_json, merge_defaults

__all__ = [
    'MakefileParser',
    'ParserOptions',
    'ParserRegistry',
    'get_parser',
    'AndroidMkParser',
    'AndroidBpParser',
    'blueprint_to_json',
    'merge_defaults',
]
