"""
C Lexer (Tokenizer)
===================

This module implements a lexer for preprocessed C source text.
It converts source text into a stream of tokens for the parser.

Token Categories
----------------
- Keywords: int, char, struct, if, while, sizeof, typedef, etc.
- Identifiers: variable, function, tag and typedef names
- Integers: decimal, hexadecimal (0x), octal (0), binary (0b), with u/l suffixes
- Floats: 1.5, .5, 1e10, 2.5f
- Strings: "double quoted"
- Characters: 'single quoted'
- Operators: +, ->, ==, &&, <<=, ..., etc.
- Delimiters: (, ), {, }, [, ], ;, ,

Operators are matched with maximal munch: the longest operator that
matches at the current position wins, so "<<=" is one token, never
"<<" followed by "=".

Comments and Directives
-----------------------
- Single-line: // comment
- Multi-line: /* comment */
- Lines starting with '#' (line markers such as `# 1 "main.c"` left by the
  preprocessor) are skipped; macro expansion has already happened.

Escape Sequences
----------------
\\n \\r \\t \\b \\f \\v \\a \\\\ \\' \\" \\? \\0, octal \\NNN and hex \\xHH.
Numeric escapes must fit in one byte (at most \\xff or \\377). Any other
escape is an error.

Example Usage
-------------
>>> from c_transpiler.frontend.lexer import CLexer
>>> lexer = CLexer('int x = a << 2;', "test.c")
>>> for token in lexer.tokenize():
...     print(token)
Token(INT, 'int', 1:1)
Token(IDENTIFIER, 'x', 1:5)
Token(ASSIGN, '=', 1:7)
Token(IDENTIFIER, 'a', 1:9)
Token(LSHIFT, '<<', 1:11)
Token(INT_LITERAL, 2, 1:14)
Token(SEMICOLON, ';', 1:15)
Token(EOF, 1:16)
"""

import logging
import re
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from c_transpiler.errors import SourceLocation
from c_transpiler.frontend.errors import (
    LexError,
    UnterminatedLiteralError,
    InvalidEscapeError,
    MalformedLiteralError,
    InvalidCharacterError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class CTokenType(Enum):
    """
    Token types for C.

    Each token type represents a category of lexical element that can
    appear in C source code. Keywords are distinguished from identifiers
    to simplify parsing.
    """

    # === Structural Tokens ===
    EOF = auto()            # End of input

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Variable/function/tag/typedef names
    INT_LITERAL = auto()    # Integer literals (all formats)
    FLOAT_LITERAL = auto()  # Floating literals
    CHAR_LITERAL = auto()   # Character literals '...'
    STRING = auto()         # String literals "..."

    # === Keywords - Type Specifiers ===
    VOID = auto()           # void
    CHAR = auto()           # char
    SHORT = auto()          # short
    INT = auto()            # int
    LONG = auto()           # long
    FLOAT = auto()          # float
    DOUBLE = auto()         # double
    SIGNED = auto()         # signed
    UNSIGNED = auto()       # unsigned
    BOOL = auto()           # _Bool
    STRUCT = auto()         # struct
    UNION = auto()          # union
    ENUM = auto()           # enum

    # === Keywords - Qualifiers ===
    CONST = auto()          # const
    VOLATILE = auto()       # volatile
    RESTRICT = auto()       # restrict

    # === Keywords - Storage Classes ===
    TYPEDEF = auto()        # typedef
    EXTERN = auto()         # extern
    STATIC = auto()         # static
    AUTO = auto()           # auto
    REGISTER = auto()       # register
    INLINE = auto()         # inline

    # === Keywords - Control Flow ===
    IF = auto()             # if
    ELSE = auto()           # else
    WHILE = auto()          # while
    FOR = auto()            # for
    DO = auto()             # do
    SWITCH = auto()         # switch
    CASE = auto()           # case
    DEFAULT = auto()        # default
    BREAK = auto()          # break
    CONTINUE = auto()       # continue
    RETURN = auto()         # return
    GOTO = auto()           # goto

    # === Keywords - Other ===
    SIZEOF = auto()         # sizeof

    # === Arithmetic Operators ===
    PLUS = auto()           # + (add or unary plus)
    MINUS = auto()          # - (subtract or negate)
    STAR = auto()           # * (multiply or dereference)
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Increment/Decrement ===
    INCREMENT = auto()      # ++
    DECREMENT = auto()      # --

    # === Comparison Operators ===
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    GT = auto()             # >
    LE = auto()             # <=
    GE = auto()             # >=

    # === Logical Operators ===
    AND = auto()            # &&
    OR = auto()             # ||
    NOT = auto()            # !

    # === Bitwise Operators ===
    AMPERSAND = auto()      # & (bitwise AND or address-of)
    PIPE = auto()           # |
    CARET = auto()          # ^
    TILDE = auto()          # ~
    LSHIFT = auto()         # <<
    RSHIFT = auto()         # >>

    # === Assignment Operators ===
    ASSIGN = auto()         # =
    PLUS_ASSIGN = auto()    # +=
    MINUS_ASSIGN = auto()   # -=
    STAR_ASSIGN = auto()    # *=
    SLASH_ASSIGN = auto()   # /=
    PERCENT_ASSIGN = auto() # %=
    AND_ASSIGN = auto()     # &=
    OR_ASSIGN = auto()      # |=
    XOR_ASSIGN = auto()     # ^=
    LSHIFT_ASSIGN = auto()  # <<=
    RSHIFT_ASSIGN = auto()  # >>=

    # === Member Access ===
    DOT = auto()            # .
    ARROW = auto()          # ->

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,
    COLON = auto()          # :
    QUESTION = auto()       # ? (ternary operator)
    ELLIPSIS = auto()       # ... (variadic parameters)


# =============================================================================
# Keyword Mapping
# =============================================================================

# Map keyword strings to their token types
KEYWORDS: dict[str, CTokenType] = {
    # Type specifiers
    "void": CTokenType.VOID,
    "char": CTokenType.CHAR,
    "short": CTokenType.SHORT,
    "int": CTokenType.INT,
    "long": CTokenType.LONG,
    "float": CTokenType.FLOAT,
    "double": CTokenType.DOUBLE,
    "signed": CTokenType.SIGNED,
    "unsigned": CTokenType.UNSIGNED,
    "_Bool": CTokenType.BOOL,
    "struct": CTokenType.STRUCT,
    "union": CTokenType.UNION,
    "enum": CTokenType.ENUM,

    # Qualifiers
    "const": CTokenType.CONST,
    "volatile": CTokenType.VOLATILE,
    "restrict": CTokenType.RESTRICT,

    # Storage classes
    "typedef": CTokenType.TYPEDEF,
    "extern": CTokenType.EXTERN,
    "static": CTokenType.STATIC,
    "auto": CTokenType.AUTO,
    "register": CTokenType.REGISTER,
    "inline": CTokenType.INLINE,

    # Control flow
    "if": CTokenType.IF,
    "else": CTokenType.ELSE,
    "while": CTokenType.WHILE,
    "for": CTokenType.FOR,
    "do": CTokenType.DO,
    "switch": CTokenType.SWITCH,
    "case": CTokenType.CASE,
    "default": CTokenType.DEFAULT,
    "break": CTokenType.BREAK,
    "continue": CTokenType.CONTINUE,
    "return": CTokenType.RETURN,
    "goto": CTokenType.GOTO,

    # Other
    "sizeof": CTokenType.SIZEOF,
}

# Builtin type keywords (a subset of KEYWORDS)
TYPE_KEYWORDS = frozenset({
    CTokenType.VOID,
    CTokenType.CHAR,
    CTokenType.SHORT,
    CTokenType.INT,
    CTokenType.LONG,
    CTokenType.FLOAT,
    CTokenType.DOUBLE,
    CTokenType.SIGNED,
    CTokenType.UNSIGNED,
    CTokenType.BOOL,
})

AGGREGATE_KEYWORDS = frozenset({CTokenType.STRUCT, CTokenType.UNION, CTokenType.ENUM})

QUALIFIER_KEYWORDS = frozenset({CTokenType.CONST, CTokenType.VOLATILE, CTokenType.RESTRICT})

STORAGE_KEYWORDS = frozenset({
    CTokenType.TYPEDEF,
    CTokenType.EXTERN,
    CTokenType.STATIC,
    CTokenType.AUTO,
    CTokenType.REGISTER,
    CTokenType.INLINE,
})

ASSIGNMENT_TOKENS = frozenset({
    CTokenType.ASSIGN,
    CTokenType.PLUS_ASSIGN,
    CTokenType.MINUS_ASSIGN,
    CTokenType.STAR_ASSIGN,
    CTokenType.SLASH_ASSIGN,
    CTokenType.PERCENT_ASSIGN,
    CTokenType.AND_ASSIGN,
    CTokenType.OR_ASSIGN,
    CTokenType.XOR_ASSIGN,
    CTokenType.LSHIFT_ASSIGN,
    CTokenType.RSHIFT_ASSIGN,
})

# Operators and delimiters, longest first within each leading character.
# Scanning tries these in order, which gives maximal munch.
OPERATORS: list[tuple[str, CTokenType]] = sorted(
    [
        ("<<=", CTokenType.LSHIFT_ASSIGN),
        (">>=", CTokenType.RSHIFT_ASSIGN),
        ("...", CTokenType.ELLIPSIS),
        ("->", CTokenType.ARROW),
        ("++", CTokenType.INCREMENT),
        ("--", CTokenType.DECREMENT),
        ("<<", CTokenType.LSHIFT),
        (">>", CTokenType.RSHIFT),
        ("<=", CTokenType.LE),
        (">=", CTokenType.GE),
        ("==", CTokenType.EQ),
        ("!=", CTokenType.NE),
        ("&&", CTokenType.AND),
        ("||", CTokenType.OR),
        ("+=", CTokenType.PLUS_ASSIGN),
        ("-=", CTokenType.MINUS_ASSIGN),
        ("*=", CTokenType.STAR_ASSIGN),
        ("/=", CTokenType.SLASH_ASSIGN),
        ("%=", CTokenType.PERCENT_ASSIGN),
        ("&=", CTokenType.AND_ASSIGN),
        ("|=", CTokenType.OR_ASSIGN),
        ("^=", CTokenType.XOR_ASSIGN),
        ("+", CTokenType.PLUS),
        ("-", CTokenType.MINUS),
        ("*", CTokenType.STAR),
        ("/", CTokenType.SLASH),
        ("%", CTokenType.PERCENT),
        ("<", CTokenType.LT),
        (">", CTokenType.GT),
        ("=", CTokenType.ASSIGN),
        ("!", CTokenType.NOT),
        ("&", CTokenType.AMPERSAND),
        ("|", CTokenType.PIPE),
        ("^", CTokenType.CARET),
        ("~", CTokenType.TILDE),
        (".", CTokenType.DOT),
        ("(", CTokenType.LPAREN),
        (")", CTokenType.RPAREN),
        ("{", CTokenType.LBRACE),
        ("}", CTokenType.RBRACE),
        ("[", CTokenType.LBRACKET),
        ("]", CTokenType.RBRACKET),
        (";", CTokenType.SEMICOLON),
        (",", CTokenType.COMMA),
        (":", CTokenType.COLON),
        ("?", CTokenType.QUESTION),
    ],
    key=lambda entry: -len(entry[0]),
)

# Valid integer suffixes: u, l, ll and their combinations (any case)
_INT_SUFFIX = re.compile(r"(?:[uU](?:ll|LL|[lL])?|(?:ll|LL|[lL])[uU]?)?")


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class CToken:
    """
    Represents a single token from C source code.

    This immutable class stores the token type, decoded value, exact
    source spelling, and location for error reporting.

    Attributes:
        type: The CTokenType classification
        value: Decoded value (str for names/strings, int for integers and
               characters, float for floating literals, None for EOF)
        lexeme: The exact source text of the token
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: CTokenType
    value: str | int | float | None
    lexeme: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, (int, float)):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_type_keyword(self) -> bool:
        """Return True if this token is a builtin type keyword."""
        return self.type in TYPE_KEYWORDS

    def is_assignment_operator(self) -> bool:
        """Return True if this token is an assignment operator."""
        return self.type in ASSIGNMENT_TOKENS


# =============================================================================
# Lexer Implementation
# =============================================================================

class CLexer:
    """
    Tokenizes preprocessed C source code.

    The lexer handles all lexical elements of C:
    - Keywords and identifiers
    - Integer literals in multiple formats, floating literals
    - String and character literals with escape sequences
    - All C operators including compound assignment, with maximal munch
    - Comments (// and /* */) and leftover preprocessor line markers

    Usage:
        lexer = CLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Simple escape sequences in strings and characters
    ESCAPE_SEQUENCES = {
        "n": "\n",      # Newline
        "r": "\r",      # Carriage return
        "t": "\t",      # Tab
        "b": "\b",      # Backspace
        "f": "\f",      # Form feed
        "v": "\v",      # Vertical tab
        "a": "\a",      # Bell/alert
        "\\": "\\",     # Backslash
        "'": "'",       # Single quote
        '"': '"',       # Double quote
        "?": "?",       # Question mark (trigraph escape)
    }

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        line_number: int = 1,
    ):
        """
        Initialize the lexer with source code.

        Args:
            source: The C source code to tokenize
            filename: Name of the source file (for error messages)
            line_number: Starting line number
        """
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = line_number
        self._column = 1

        # Track line start position for error reporting
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[CToken]:
        """
        Generate tokens from the source code.

        Yields:
            CToken objects representing each lexical element

        Raises:
            LexError: If the source cannot be tokenized
        """
        while not self._at_end():
            self._skip_whitespace_and_comments()

            if self._at_end():
                break

            yield self._scan_token()

        # Always end with EOF token
        yield CToken(CTokenType.EOF, None, "", self._line, self._column, self.filename)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking for error reporting.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _location(self, line: Optional[int] = None, column: Optional[int] = None) -> SourceLocation:
        return SourceLocation(self.filename, line or self._line, column or self._column)

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: CTokenType,
        value: str | int | float | None,
        start_pos: int,
        start_line: int,
        start_column: int,
    ) -> CToken:
        """
        Create a token spanning from start_pos to the current position.

        Args:
            token_type: The type of token
            value: The decoded token value
            start_pos: Offset of the first character of the token
            start_line: Line of the first character
            start_column: Column of the first character
        """
        return CToken(
            type=token_type,
            value=value,
            lexeme=self.source[start_pos:self._pos],
            line=start_line,
            column=start_column,
            filename=self.filename,
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace, comments and preprocessor line markers."""
        while not self._at_end():
            char = self._peek()

            if char in " \t\n\r\f\v":
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                self._skip_single_line_comment()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_multi_line_comment()
                continue

            if char == "#" and self._at_line_start():
                self._skip_directive_line()
                continue

            break

    def _at_line_start(self) -> bool:
        """True if only whitespace precedes the current position on this line."""
        return self.source[self._line_start_pos:self._pos].strip() == ""

    def _skip_single_line_comment(self) -> None:
        """Skip a single-line comment (// ...)."""
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    def _skip_multi_line_comment(self) -> None:
        """
        Skip a multi-line comment (/* ... */).

        Raises:
            LexError: If comment is not terminated
        """
        start_line = self._line
        start_col = self._column

        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        raise LexError(
            "unterminated multi-line comment",
            self._location(start_line, start_col),
            hint="add closing */ to terminate the comment",
        )

    def _skip_directive_line(self) -> None:
        """Skip a line marker or directive left behind by the preprocessor."""
        start = self._pos
        while not self._at_end() and self._peek() != "\n":
            # Backslash-newline continues the directive
            if self._peek() == "\\" and self._peek(1) == "\n":
                self._advance()
            self._advance()
        logger.debug(f"{self.filename}:{self._line}: skipped directive {self.source[start:self._pos]!r}")

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> CToken:
        """Scan the next token from source."""
        start_pos = self._pos
        start_line = self._line
        start_column = self._column

        char = self._peek()

        # Identifiers and keywords
        if char in self.IDENT_START:
            return self._scan_identifier(start_pos, start_line, start_column)

        # Numbers (including floats written as .5)
        if char.isdigit() or (char == "." and self._peek(1).isdigit()):
            return self._scan_number(start_pos, start_line, start_column)

        if char == '"':
            return self._scan_string(start_pos, start_line, start_column)

        if char == "'":
            return self._scan_char(start_pos, start_line, start_column)

        return self._scan_operator(start_pos, start_line, start_column)

    def _scan_identifier(self, start_pos: int, start_line: int, start_column: int) -> CToken:
        """
        Scan an identifier or keyword.

        Identifiers start with a letter or underscore and can contain
        letters, digits, and underscores. Keywords are distinguished
        by checking against the keyword table.
        """
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._advance()

        name = self.source[start_pos:self._pos]
        token_type = KEYWORDS.get(name, CTokenType.IDENTIFIER)
        return self._make_token(token_type, name, start_pos, start_line, start_column)

    def _scan_number(self, start_pos: int, start_line: int, start_column: int) -> CToken:
        """
        Scan a numeric literal.

        Handles:
        - Decimal: 123, 123u, 123UL
        - Hexadecimal: 0x7F or 0X7F
        - Octal: 0177
        - Binary: 0b1010 (GCC extension)
        - Floating: 1.5, .5, 1., 1e10, 2.5e-3f
        """
        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance()
            self._advance()
            return self._scan_radix_digits(16, string.hexdigits, start_pos, start_line, start_column)

        if self._peek() == "0" and self._peek(1) in ("b", "B"):
            self._advance()
            self._advance()
            return self._scan_radix_digits(2, "01", start_pos, start_line, start_column)

        while self._peek().isdigit():
            self._advance()

        is_float = False
        if self._peek() == "." and self._peek(1) != ".":
            is_float = True
            self._advance()
            while self._peek().isdigit():
                self._advance()

        if self._peek() in ("e", "E"):
            is_float = True
            self._advance()
            if self._peek() in ("+", "-"):
                self._advance()
            if not self._peek().isdigit():
                raise self._malformed(start_pos, start_line, start_column, "exponent has no digits")
            while self._peek().isdigit():
                self._advance()

        if is_float:
            digits_end = self._pos
            if self._peek() in ("f", "F", "l", "L"):
                self._advance()
            self._reject_trailing_identifier(start_pos, start_line, start_column)
            value = float(self.source[start_pos:digits_end])
            return self._make_token(CTokenType.FLOAT_LITERAL, value, start_pos, start_line, start_column)

        digits = self.source[start_pos:self._pos]
        if len(digits) > 1 and digits.startswith("0"):
            if any(d not in "01234567" for d in digits):
                raise self._malformed(start_pos, start_line, start_column, "invalid digit in octal constant")
            value = int(digits, 8)
        else:
            value = int(digits)

        self._scan_int_suffix(start_pos, start_line, start_column)
        return self._make_token(CTokenType.INT_LITERAL, value, start_pos, start_line, start_column)

    def _scan_radix_digits(
        self,
        base: int,
        valid: str,
        start_pos: int,
        start_line: int,
        start_column: int,
    ) -> CToken:
        """Scan digits after a 0x/0b prefix."""
        digits_start = self._pos
        while self._peek() and self._peek() in valid:
            self._advance()

        digits = self.source[digits_start:self._pos]
        if not digits:
            raise self._malformed(start_pos, start_line, start_column, "prefix has no digits")

        self._scan_int_suffix(start_pos, start_line, start_column)
        return self._make_token(
            CTokenType.INT_LITERAL, int(digits, base), start_pos, start_line, start_column
        )

    def _scan_int_suffix(self, start_pos: int, start_line: int, start_column: int) -> None:
        """Consume an integer suffix (u, l, ul, ll, ...) and validate what follows."""
        suffix_start = self._pos
        while self._peek() and self._peek() in "uUlL":
            self._advance()
        suffix = self.source[suffix_start:self._pos]
        if not _INT_SUFFIX.fullmatch(suffix):
            raise self._malformed(start_pos, start_line, start_column, f"invalid suffix '{suffix}'")
        self._reject_trailing_identifier(start_pos, start_line, start_column)

    def _reject_trailing_identifier(self, start_pos: int, start_line: int, start_column: int) -> None:
        """A number immediately followed by a letter or digit (12abc) is malformed."""
        if self._peek() and (self._peek() in self.IDENT_CHARS or self._peek() == "."):
            while self._peek() and (self._peek() in self.IDENT_CHARS or self._peek() == "."):
                self._advance()
            raise self._malformed(start_pos, start_line, start_column, "invalid characters in number")

    def _malformed(self, start_pos: int, start_line: int, start_column: int, reason: str) -> MalformedLiteralError:
        return MalformedLiteralError(
            self.source[start_pos:self._pos],
            reason,
            self._location(start_line, start_column),
            self._get_current_line(),
        )

    def _scan_string(self, start_pos: int, start_line: int, start_column: int) -> CToken:
        """
        Scan a double-quoted string literal, decoding escape sequences.

        The value holds one character per byte of the literal: a numeric
        escape gives its byte, and a non-ASCII source character gives its
        UTF-8 bytes.
        """
        self._advance()  # consume opening "

        chars = []
        while not self._at_end():
            char = self._peek()

            if char == '"':
                self._advance()
                return self._make_token(
                    CTokenType.STRING, "".join(chars), start_pos, start_line, start_column
                )

            if char == "\n":
                break

            if char == "\\":
                self._advance()
                chars.append(self._scan_escape_sequence())
            elif ord(char) > 0x7F:
                self._advance()
                chars.extend(chr(byte) for byte in char.encode("utf-8"))
            else:
                chars.append(self._advance())

        raise UnterminatedLiteralError(
            "string",
            self._location(start_line, start_column),
            self._get_current_line(),
        )

    def _scan_char(self, start_pos: int, start_line: int, start_column: int) -> CToken:
        """
        Scan a single-quoted character literal.

        The token value is the code point of the (decoded) character.
        """
        self._advance()  # consume opening '

        if self._at_end() or self._peek() == "\n":
            raise UnterminatedLiteralError(
                "character",
                self._location(start_line, start_column),
                self._get_current_line(),
            )

        if self._peek() == "'":
            raise LexError(
                "empty character literal",
                self._location(start_line, start_column),
                source_line=self._get_current_line(),
            )

        if self._peek() == "\\":
            self._advance()
            char = self._scan_escape_sequence()
        else:
            char = self._advance()

        if self._peek() != "'":
            if self._at_end() or self._peek() == "\n" or "'" not in self._rest_of_line():
                raise UnterminatedLiteralError(
                    "character",
                    self._location(start_line, start_column),
                    self._get_current_line(),
                )
            raise LexError(
                "character literal too long",
                self._location(),
                hint="character literals can only contain a single character",
                source_line=self._get_current_line(),
            )
        self._advance()  # consume closing '

        return self._make_token(CTokenType.CHAR_LITERAL, ord(char), start_pos, start_line, start_column)

    def _scan_escape_sequence(self) -> str:
        """
        Scan an escape sequence after backslash.

        Returns:
            The character represented by the escape sequence

        Raises:
            InvalidEscapeError: For escapes C does not define
        """
        escape_line = self._line
        escape_column = self._column - 1

        if self._at_end():
            raise LexError("unexpected end of input in escape sequence", self._location())

        char = self._advance()

        if char in self.ESCAPE_SEQUENCES:
            return self.ESCAPE_SEQUENCES[char]

        # Hex escape: \xHH...
        if char == "x":
            hex_chars = []
            while self._peek() and self._peek() in string.hexdigits:
                hex_chars.append(self._advance())

            if not hex_chars:
                raise InvalidEscapeError(
                    "x",
                    self._location(escape_line, escape_column),
                    self._get_current_line(),
                )
            return self._escape_byte("x" + "".join(hex_chars), int("".join(hex_chars), 16),
                                     escape_line, escape_column)

        # Octal escape: \NNN (up to 3 digits, \0 included)
        if char in "01234567":
            octal_chars = [char]
            for _ in range(2):
                if self._peek() and self._peek() in "01234567":
                    octal_chars.append(self._advance())
                else:
                    break
            return self._escape_byte("".join(octal_chars), int("".join(octal_chars), 8),
                                     escape_line, escape_column)

        raise InvalidEscapeError(
            char,
            self._location(escape_line, escape_column),
            self._get_current_line(),
        )

    def _escape_byte(self, sequence: str, value: int, line: int, column: int) -> str:
        """Numeric escapes denote one char, so the value must fit in a byte."""
        if value > 0xFF:
            raise InvalidEscapeError(
                sequence,
                self._location(line, column),
                self._get_current_line(),
                hint="escape value must be at most \\xff (\\377)",
            )
        return chr(value)

    def _scan_operator(self, start_pos: int, start_line: int, start_column: int) -> CToken:
        """
        Scan an operator or delimiter using maximal munch.

        OPERATORS is ordered longest first, so the first spelling that
        matches at the current position is the longest possible token.
        """
        for spelling, token_type in OPERATORS:
            if self.source.startswith(spelling, self._pos):
                for _ in spelling:
                    self._advance()
                return self._make_token(token_type, spelling, start_pos, start_line, start_column)

        char = self._peek()
        raise InvalidCharacterError(
            char,
            self._location(start_line, start_column),
            self._get_current_line(),
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    def _rest_of_line(self) -> str:
        line_end = self.source.find("\n", self._pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._pos:line_end]


def tokenize(source: str, filename: str = "<input>") -> list[CToken]:
    """Tokenize a complete source string, EOF token included."""
    return list(CLexer(source, filename).tokenize())
