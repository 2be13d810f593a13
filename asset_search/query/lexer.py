"""
Lexical analyzer for the asset query language.

The lexer is a small state machine in the style of Rob Pike's "Lexical
Scanning in Go": every state is a function that consumes some input, emits
zero or more tokens, and returns the next state (or None to stop). Tokens
are handed to the consumer through a generator, so the parser pulls them
one at a time and lexing only runs as far ahead as the parser has asked.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional


class TokenType(Enum):
    AND = 'and'
    ARG = 'arg'
    CLOSE = 'close'
    COLON = 'colon'
    EOF = 'eof'
    ERROR = 'error'
    NOT = 'not'
    OPEN = 'open'
    OR = 'or'
    PREDICATE = 'predicate'


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "end of query"
        return f"{self.type.value} {self.value!r}"


WHITESPACE = '\t\n\r '
# and/or only count as operators when followed by one of these (or the end)
OPERATOR_BOUNDARY = '\t\n\r ('
# escaped characters that a quoted string keeps without the backslash
QUOTE_ESCAPES = '"\' \t'


class QueryLexer:
    def __init__(self, text: str):
        self.input = text
        # start marks the beginning of the pending token
        self.start = 0
        # pos is the index of the next character to be examined
        self.pos = 0
        self._pending: List[Token] = []

    def emit(self, token_type: TokenType):
        """Queues the pending input as a token of the given type."""
        self.emit_value(token_type, self.input[self.start:self.pos])

    def emit_value(self, token_type: TokenType, value: str):
        self._pending.append(Token(token_type, value))
        self.start = self.pos

    def take_pending(self) -> List[Token]:
        tokens, self._pending = self._pending, []
        return tokens

    def next(self) -> Optional[str]:
        if self.pos >= len(self.input):
            return None
        ch = self.input[self.pos]
        self.pos += 1
        return ch

    def peek(self) -> Optional[str]:
        if self.pos >= len(self.input):
            return None
        return self.input[self.pos]

    def ignore(self):
        """Skips over the pending input."""
        self.start = self.pos

    def rewind(self):
        """Moves back to the start of the pending token."""
        self.pos = self.start

    def is_match(self, valid: str) -> bool:
        ch = self.peek()
        return ch is not None and ch in valid

    def at_end(self) -> bool:
        return self.pos >= len(self.input)

    def accept_string(self, expected: str) -> bool:
        """Consumes the expected text, or rewinds and returns False."""
        for ch in expected:
            if self.next() != ch:
                self.rewind()
                return False
        return True

    def accept_run(self, valid: str) -> bool:
        return self.accept_run_fn(lambda ch: ch in valid)

    def accept_run_fn(self, valid: Callable[[str], bool]) -> bool:
        old_pos = self.pos
        ch = self.peek()
        while ch is not None and valid(ch):
            self.pos += 1
            ch = self.peek()
        return old_pos < self.pos


StateFn = Callable[[QueryLexer], Optional["StateFn"]]


def lex(text: str) -> Iterator[Token]:
    """
    Yields the tokens of the query, ending with a single EOF token, or
    stopping right after an ERROR token.
    """
    lexer = QueryLexer(text)
    state: Optional[StateFn] = lex_start
    while state is not None:
        state = state(lexer)
        yield from lexer.take_pending()


def errorf(lexer: QueryLexer, message: str) -> None:
    lexer.emit_value(TokenType.ERROR, message)
    return None


def lex_start(lexer: QueryLexer) -> Optional[StateFn]:
    lexer.accept_run(WHITESPACE)
    lexer.ignore()
    ch = lexer.next()
    if ch is None:
        lexer.emit(TokenType.EOF)
        return None
    if ch == '(':
        lexer.emit(TokenType.OPEN)
        return lex_start
    if ch == ')':
        lexer.emit(TokenType.CLOSE)
        return lex_operator
    if ch == '-':
        lexer.emit(TokenType.NOT)
        return lex_start
    lexer.rewind()
    return lex_predicate


def lex_operator(lexer: QueryLexer) -> Optional[StateFn]:
    """Looks for a boolean operator after a complete operand."""
    lexer.accept_run(WHITESPACE)
    lexer.ignore()
    ch = lexer.peek()
    if ch == 'a':
        return lex_and
    if ch == 'o':
        return lex_or
    return lex_start


def lex_and(lexer: QueryLexer) -> Optional[StateFn]:
    return _lex_keyword(lexer, 'and', TokenType.AND)


def lex_or(lexer: QueryLexer) -> Optional[StateFn]:
    return _lex_keyword(lexer, 'or', TokenType.OR)


def _lex_keyword(lexer: QueryLexer, word: str, token_type: TokenType) -> Optional[StateFn]:
    if lexer.accept_string(word) and (lexer.at_end() or lexer.is_match(OPERATOR_BOUNDARY)):
        lexer.emit(token_type)
        return lex_start
    # something like "andy:" or "orange:", start over as a predicate
    lexer.rewind()
    return lex_predicate


def lex_predicate(lexer: QueryLexer) -> Optional[StateFn]:
    """Expects a run of letters followed by a colon."""
    lexer.accept_run_fn(str.isalpha)
    if lexer.peek() == ':':
        lexer.emit(TokenType.PREDICATE)
        lexer.next()
        lexer.emit(TokenType.COLON)
        return lex_argument
    return errorf(lexer, "bare literals unsupported")


def lex_argument(lexer: QueryLexer) -> Optional[StateFn]:
    """Handles quoted strings, raw values and colon separated chains."""
    ch = lexer.next()
    if ch is None:
        return lex_start
    if ch == '"':
        return lex_string_double
    if ch == "'":
        return lex_string_single

    lexer.rewind()
    lexer.accept_run_fn(is_search_word_char)
    lexer.emit(TokenType.ARG)
    if lexer.peek() == ':':
        lexer.next()
        lexer.emit(TokenType.COLON)
        return lex_argument
    return lex_operator


def lex_string_double(lexer: QueryLexer) -> Optional[StateFn]:
    return _lex_string(lexer, '"')


def lex_string_single(lexer: QueryLexer) -> Optional[StateFn]:
    return _lex_string(lexer, "'")


def _lex_string(lexer: QueryLexer, end: str) -> Optional[StateFn]:
    """Scans a quoted string up to the closing quote character."""
    text = []
    ch = lexer.next()
    while ch is not None:
        if ch == '\\':
            ch = lexer.next()
            if ch is None:
                return errorf(lexer, "improperly terminated string")
            if ch in QUOTE_ESCAPES:
                text.append(ch)
            else:
                # left for a later unescaping pass
                text.append('\\')
                text.append(ch)
        elif ch == end:
            lexer.emit_value(TokenType.ARG, ''.join(text))
            return lex_operator
        else:
            text.append(ch)
        ch = lexer.next()
    return errorf(lexer, "unclosed quoted string")


def is_search_word_char(ch: str) -> bool:
    """Characters allowed in an unquoted argument."""
    if ch in ':()':
        return False
    return not ch.isspace()
