"""zoopgen: class inheritance, mixins and properties for Zig by code generation."""

from .config import GeneratorConfig as GeneratorConfig
from .decls import SourceUnit as SourceUnit
from .engine import Generator as Generator, GenerationResult as GenerationResult, generate as generate
from .errors import ZoopError as ZoopError
from .lexer import Lexer as Lexer, LexerError as LexerError
from .scanner import Scanner as Scanner, scan_unit as scan_unit
