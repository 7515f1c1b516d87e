"""Lexer for textual filter expressions."""

import codecs
import re
import uuid

import ply.lex as lex

# Backslash escapes inside string literals
ESCAPE_SEQUENCE = re.compile(r"\\(U[0-9a-fA-F]{8}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|.)", re.DOTALL)
KNOWN_ESCAPES = set("\\'\"abfnrtv01234567xuU\n")


def _unescape(match: re.Match) -> str:
    escape = match.group(0)
    if escape[1] not in KNOWN_ESCAPES:
        # Unknown escapes stand for the character itself
        return escape[1]
    return codecs.decode(escape, "unicode_escape")


class FilterLexer:
    """Lexer for tokenizing filter expressions like ``age >= 18 and active = true``."""

    # Reserved keywords
    reserved = {
        "and": "AND",
        "or": "OR",
        "true": "TRUE",
        "false": "FALSE",
        "null": "NULL",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "INTEGER",
        "FLOAT",
        "STRING",
        "UUID",
        "LPAREN",
        "RPAREN",
        "EQ",
        "NEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
    ] + list(reserved.values())

    # Simple tokens
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_EQ = r"="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"

    t_ignore = " \t"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_UUID(self, t: lex.LexToken) -> lex.LexToken:
        r'uuid\(\s*"[^"]*"\s*\)'
        literal = t.value[t.value.index('"') + 1 : t.value.rindex('"')]
        try:
            t.value = uuid.UUID(literal)
        except ValueError:
            raise SyntaxError(f"Invalid uuid literal '{literal}' at position {t.lexpos}") from None
        return t

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+\.\d+"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"'
        # Remove quotes and handle escapes
        try:
            t.value = ESCAPE_SEQUENCE.sub(_unescape, t.value[1:-1])
        except UnicodeDecodeError:
            raise SyntaxError(f"Invalid escape in string at position {t.lexpos}") from None
        return t

    def t_BACKTICK_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"`[^`]+`"
        # Column names that clash with keywords
        t.value = t.value[1:-1]
        t.type = "IDENTIFIER"
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_.]*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
