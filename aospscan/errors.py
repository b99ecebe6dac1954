"""
Exceptions raised by aospscan.

None of these escape a parse run: parsers catch them per file or per
block and carry on. ConfigurationError is the one surfaced to the CLI.
"""


class ParserError(Exception):
    """Base exception for build-file parsing errors."""
    def __init__(self, message: str, file_path: str = ""):
        self.message = message
        self.file_path = file_path
        super().__init__(f"{file_path}: {message}" if file_path else message)


class BlueprintSyntaxError(ParserError):
    """A Blueprint module block could not be converted to JSON."""
    pass


class ConfigurationError(Exception):
    """Invalid scan configuration."""
    pass
