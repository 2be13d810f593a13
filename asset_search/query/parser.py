"""
Recursive descent parser for the asset query language, modeled after the
search syntax of Perkeep (https://perkeep.org).

Grammar, with AND binding tighter than OR:

    expression := EOF | operand (OR or-rhs | and-rhs*)
    and-rhs    := operand (AND? operand)*
    or-rhs     := and (OR and)*
    operand    := NOT* (atom | group)
    atom       := PREDICATE COLON ARG (COLON ARG)*
    group      := OPEN expression CLOSE

Juxtaposed operands are joined with an implicit AND.
"""
import logging
from typing import Generator, List, Optional

from ..exceptions import QueryError
from .constraints import AndConstraint, Constraint, EmptyConstraint, NotConstraint, OrConstraint
from .lexer import Token, TokenType, lex
from .predicates import build_predicate


def parse(query: str) -> Constraint:
    """
    Parses the query into a constraint tree.

    Raises:
        QueryError: the query has a lexical or syntax error.
    """
    parser = QueryParser(lex(query))
    try:
        constraint = parser.parse_query()
    finally:
        parser.drain()
    logging.debug(f"Parsed query {query!r} into {constraint!r}")
    return constraint


class QueryParser:
    def __init__(self, tokens: Generator[Token, None, None]):
        self.tokens = tokens
        self._peeked: Optional[Token] = None

    def drain(self):
        """
        Consumes the remaining tokens so the lexer runs to completion, then
        closes it. Tokens read here are ignored.
        """
        while True:
            token = self.next()
            if token.type in (TokenType.EOF, TokenType.ERROR):
                break
        self.tokens.close()

    def next(self) -> Token:
        if self._peeked is not None:
            token, self._peeked = self._peeked, None
            return token
        # a lexer that stopped early (after an error) behaves as if at EOF
        return next(self.tokens, Token(TokenType.EOF, ''))

    def peek(self) -> Token:
        if self._peeked is None:
            self._peeked = next(self.tokens, Token(TokenType.EOF, ''))
        return self._peeked

    def parse_query(self) -> Constraint:
        """Parses the whole query, rejecting a stray closing paren."""
        constraint = self.parse_expression()
        if self.peek().type == TokenType.CLOSE:
            raise QueryError("found ) without (")
        return constraint

    def parse_expression(self) -> Constraint:
        """Parses up to the end of the query or the end of the current group."""
        if self.peek().type == TokenType.EOF:
            return EmptyConstraint()
        ret = self.parse_operand()
        while True:
            token_type = self.peek().type
            if token_type == TokenType.OR:
                self.next()
                return self.parse_or_rhs(ret)
            if token_type in (TokenType.CLOSE, TokenType.EOF):
                break
            if token_type == TokenType.AND:
                self.next()
            # an explicit AND still needs an operand after it
            ret = self.parse_and_rhs(ret)
        return ret

    def parse_operand(self) -> Constraint:
        negated = self.strip_not()
        token = self.peek()
        if token.type == TokenType.ERROR:
            raise QueryError(token.value)
        if token.type == TokenType.EOF:
            raise QueryError(f"expected operand, got {token}")
        if token.type == TokenType.CLOSE:
            raise QueryError("found ) without (")
        if token.type == TokenType.OPEN:
            ret = self.parse_group()
        else:
            ret = self.parse_atom()
        if negated:
            ret = NotConstraint(ret)
        return ret

    def strip_not(self) -> bool:
        """Consumes a run of NOT operators; True if the count is odd."""
        negated = False
        while self.peek().type == TokenType.NOT:
            self.next()
            negated = not negated
        return negated

    def parse_atom(self) -> Constraint:
        token = self.next()
        if token.type != TokenType.PREDICATE:
            raise QueryError(f"expected predicate, got {token}")
        keyword = token.value
        args: List[str] = []
        arg_expected = False
        while True:
            token = self.peek()
            if token.type == TokenType.COLON:
                self.next()
                arg_expected = True
            elif token.type == TokenType.ARG:
                self.next()
                args.append(token.value)
                arg_expected = False
            else:
                break
        if arg_expected:
            # trailing colon, as in "loc:label:"
            args.append('')
        return build_predicate(keyword, args)

    def parse_group(self) -> Constraint:
        self.next()
        constraint = self.parse_expression()
        if self.peek().type != TokenType.CLOSE:
            raise QueryError("no matching ) for (")
        self.next()
        return constraint

    def parse_or_rhs(self, lhs: Constraint) -> Constraint:
        """Parses the right side of an OR, including chained ORs."""
        ret = lhs
        while True:
            ret = OrConstraint(ret, self.parse_and())
            token_type = self.peek().type
            if token_type == TokenType.OR:
                self.next()
            elif token_type in (TokenType.AND, TokenType.CLOSE, TokenType.EOF):
                break
        return ret

    def parse_and(self) -> Constraint:
        """Parses one OR operand, which may itself be a chain of ANDs."""
        ret = self.parse_operand()
        token_type = self.peek().type
        if token_type == TokenType.AND:
            self.next()
        elif token_type in (TokenType.OR, TokenType.CLOSE, TokenType.EOF):
            return ret
        return self.parse_and_rhs(ret)

    def parse_and_rhs(self, lhs: Constraint) -> Constraint:
        """Parses the right side of an AND, including chained ANDs."""
        ret = lhs
        while True:
            ret = AndConstraint(ret, self.parse_operand())
            if self.peek().type != TokenType.AND:
                break
            self.next()
        return ret
