"""Lexical analysis of calculator expressions. Turns raw text into a flat list of Tokens, terminated by a single END
token. The parser consumes this list as is and never goes back to the text.

At each position the first matching rule wins:

```
<whitespace>  ::= skipped
<number>      ::= <digit> (<digit> | ".")*         ; greedy, not validated here ("1.2.3" is a single token)
<identifier>  ::= (<letter> | "_") (<letter> | <digit> | "_")*
<keyword>     ::= "let" | "def" | "fn"              ; identifiers that are reserved
<operator>    ::= "+" | "-" | "*" | "/" | "^"
<arrow>       ::= "=>"
<equals>      ::= "="                               ; only if not followed by ">"
<punctuation> ::= "(" | ")" | ","
```

Any other character raises a LexError pointing at it.
"""

from dataclasses import dataclass
from enum import Enum
import string

from fncalc.lang.error import LexError


KEYWORDS = ("let", "def", "fn")
OPERATORS = "+-*/^"

DIGITS = string.digits
IDENT_START = string.ascii_letters + "_"
IDENT_CHARS = IDENT_START + string.digits


class Kind(Enum):
    """Kinds of token produced by tokenize."""
    NUMBER = "number"
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    OPERATOR = "operator"
    LPAREN = "'('"
    RPAREN = "')'"
    COMMA = "','"
    EQUALS = "'='"
    ARROW = "'=>'"
    END = "end of input"


PUNCTUATION = {"(": Kind.LPAREN, ")": Kind.RPAREN, ",": Kind.COMMA}


@dataclass(frozen=True)
class Token:
    """A lexeme and its kind. pos is the offset of the lexeme in the tokenized text, kept for error messages."""
    kind: Kind
    lexeme: str
    pos: int = 0

    def matches(self, kind, lexeme=None):
        """Whether or not this token is of kind (and, if given, has exactly lexeme)."""
        return self.kind is kind and (lexeme is None or self.lexeme == lexeme)

    def __str__(self):
        return self.lexeme if self.kind is not Kind.END else self.kind.value


def _scan(text, pos, chars):
    """Returns the first position at or after pos whose character is not in chars."""
    while pos < len(text) and text[pos] in chars:
        pos += 1
    return pos


def tokenize(text):
    """Returns list of Tokens in text, always ending in an END token. Raises LexError on any character that starts no
    token.
    """
    tokens = []
    pos = 0

    while pos < len(text):
        char = text[pos]

        if char.isspace():
            pos += 1

        elif char in DIGITS:
            end = _scan(text, pos, DIGITS + ".")
            tokens.append(Token(Kind.NUMBER, text[pos:end], pos))
            pos = end

        elif char in IDENT_START:
            end = _scan(text, pos, IDENT_CHARS)
            lexeme = text[pos:end]
            tokens.append(Token(Kind.KEYWORD if lexeme in KEYWORDS else Kind.IDENTIFIER, lexeme, pos))
            pos = end

        elif char in OPERATORS:
            tokens.append(Token(Kind.OPERATOR, char, pos))
            pos += 1

        elif char == "=":
            if text.startswith("=>", pos):
                tokens.append(Token(Kind.ARROW, "=>", pos))
                pos += 2
            else:
                tokens.append(Token(Kind.EQUALS, "=", pos))
                pos += 1

        elif char in PUNCTUATION:
            tokens.append(Token(PUNCTUATION[char], char, pos))
            pos += 1

        else:
            raise LexError(text, pos)

    tokens.append(Token(Kind.END, "", len(text)))
    return tokens
