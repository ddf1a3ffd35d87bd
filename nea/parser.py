"""Recursive-descent parser for the Nea language.

Each precedence level has its own method, from lowest to highest:

    assignment -> or -> and -> equality -> comparison -> additive
    -> multiplicative -> unary -> postfix -> primary

Binary levels loop to build left-associative trees; assignment and unary
recurse to build right-associative ones. Semicolons are optional statement
terminators. `return` and `break` are checked against their enclosing
function and loop while parsing.

`parse_program` is the public entry point and returns a `Program` node.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from .ast import (
    Program, ExprStmt, PrintStmt, VarDecl, Block, IfStmt, WhileStmt,
    FuncDecl, ReturnStmt, BreakStmt, Literal, Variable, Assign, BinaryOp,
    Logical, UnaryOp, Grouping, Call, ArrayLit, DictLit, Index, Member, Node,
)
from .errors import ParseError
from .lexer import Token, tokenize, NUMBER, STRING, IDENTIFIER, KEYWORD, OPERATOR, PUNCT, EOF
from .types import NIL


SYMBOL_KINDS = (KEYWORD, OPERATOR, PUNCT)

LOGICAL_OPS = {'||': '||', 'or': '||', '&&': '&&', 'and': '&&'}


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.function_depth = 0
        self.loop_depth = 0

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.peek().kind == EOF

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != EOF:
            self.pos += 1
        return token

    @staticmethod
    def _is(token: Token, expected: str) -> bool:
        if token.kind == expected:
            return True
        return token.kind in SYMBOL_KINDS and token.lexeme == expected

    def match(self, expected: Union[str, Sequence[str]]) -> bool:
        token = self.peek()
        if isinstance(expected, str):
            return self._is(token, expected)
        return any(self._is(token, e) for e in expected)

    def accept(self, expected: Union[str, Sequence[str]]) -> Optional[Token]:
        if self.match(expected):
            return self.advance()
        return None

    def consume(self, expected: str, what: Optional[str] = None) -> Token:
        if self.match(expected):
            return self.advance()
        token = self.peek()
        description = what or f"'{expected}'"
        raise ParseError(f"expected {description}, got {token.describe()}", token.line)

    def end_statement(self) -> None:
        self.accept(';')

    # Statements

    def parse_program(self) -> Program:
        statements: List[Node] = []
        try:
            while not self.at_end():
                if self.accept(';'):
                    continue
                statements.append(self.parse_statement())
        except RecursionError:
            raise ParseError('expression nested too deeply', self.peek().line) from None
        return Program(statements)

    def parse_statement(self) -> Node:
        token = self.peek()
        if token.kind == KEYWORD:
            if token.lexeme == 'var':
                stmt = self.parse_var_decl()
                self.end_statement()
                return stmt
            if token.lexeme == 'func':
                return self.parse_func_decl()
            if token.lexeme == 'if':
                return self.parse_if_stmt()
            if token.lexeme == 'while':
                return self.parse_while_stmt()
            if token.lexeme == 'for':
                return self.parse_for_stmt()
            if token.lexeme == 'return':
                return self.parse_return_stmt()
            if token.lexeme == 'break':
                return self.parse_break_stmt()
            if token.lexeme == 'print':
                self.advance()
                expr = self.parse_expression()
                self.end_statement()
                return PrintStmt(expr, line=token.line)
        if self._is(token, '{'):
            return self.parse_block()
        expr = self.parse_expression()
        self.end_statement()
        return ExprStmt(expr, line=token.line)

    def parse_block(self) -> Block:
        start = self.consume('{')
        statements: List[Node] = []
        while not self.match('}') and not self.at_end():
            if self.accept(';'):
                continue
            statements.append(self.parse_statement())
        self.consume('}', "'}' to close block")
        return Block(statements, line=start.line)

    def parse_var_decl(self) -> VarDecl:
        start = self.consume('var')
        name = self.consume(IDENTIFIER, 'variable name').lexeme
        expr = None
        if self.accept('='):
            expr = self.parse_expression()
        return VarDecl(name, expr, line=start.line)

    def parse_func_decl(self) -> FuncDecl:
        start = self.consume('func')
        name = self.consume(IDENTIFIER, 'function name').lexeme
        self.consume('(', "'(' after function name")
        params: List[str] = []
        if not self.match(')'):
            while True:
                param = self.consume(IDENTIFIER, 'parameter name').lexeme
                if param in params:
                    raise ParseError(f"duplicate parameter '{param}'", self.previous().line)
                params.append(param)
                if not self.accept(','):
                    break
        self.consume(')', "')' after parameters")
        # A loop around the declaration does not make `break` legal in the body.
        saved_loop_depth = self.loop_depth
        self.loop_depth = 0
        self.function_depth += 1
        try:
            body = self.parse_block()
        finally:
            self.function_depth -= 1
            self.loop_depth = saved_loop_depth
        return FuncDecl(name, params, body, line=start.line)

    def parse_if_stmt(self) -> IfStmt:
        start = self.consume('if')
        self.consume('(', "'(' after 'if'")
        condition = self.parse_expression()
        self.consume(')', "')' after condition")
        then_branch = self.parse_statement()
        else_branch = None
        if self.accept('else'):
            else_branch = self.parse_statement()
        return IfStmt(condition, then_branch, else_branch, line=start.line)

    def parse_loop_body(self) -> Node:
        self.loop_depth += 1
        try:
            return self.parse_statement()
        finally:
            self.loop_depth -= 1

    def parse_while_stmt(self) -> WhileStmt:
        start = self.consume('while')
        self.consume('(', "'(' after 'while'")
        condition = self.parse_expression()
        self.consume(')', "')' after condition")
        body = self.parse_loop_body()
        return WhileStmt(condition, body, line=start.line)

    def parse_for_stmt(self) -> Node:
        """Parse `for (init; cond; incr) body` into `{ init; while (cond) { body; incr } }`."""
        start = self.consume('for')
        self.consume('(', "'(' after 'for'")
        init: Optional[Node] = None
        if not self.match(';'):
            if self.match('var'):
                init = self.parse_var_decl()
            else:
                init_token = self.peek()
                init = ExprStmt(self.parse_expression(), line=init_token.line)
        self.consume(';', "';' after loop initializer")
        condition: Node = Literal(True, line=start.line)
        if not self.match(';'):
            condition = self.parse_expression()
        self.consume(';', "';' after loop condition")
        increment: Optional[Node] = None
        if not self.match(')'):
            incr_token = self.peek()
            increment = ExprStmt(self.parse_expression(), line=incr_token.line)
        self.consume(')', "')' after for clauses")
        body = self.parse_loop_body()

        if increment is not None:
            body = Block([body, increment], line=body.line)
        loop: Node = WhileStmt(condition, body, line=start.line)
        if init is not None:
            loop = Block([init, loop], line=start.line)
        return loop

    def _value_follows(self, keyword: Token) -> bool:
        token = self.peek()
        if token.kind == EOF or self._is(token, ';') or self._is(token, '}'):
            return False
        return token.line == keyword.line

    def parse_return_stmt(self) -> ReturnStmt:
        start = self.consume('return')
        if self.function_depth == 0:
            raise ParseError("'return' outside function", start.line)
        value = self.parse_expression() if self._value_follows(start) else None
        self.end_statement()
        return ReturnStmt(value, line=start.line)

    def parse_break_stmt(self) -> BreakStmt:
        start = self.consume('break')
        if self.loop_depth == 0:
            raise ParseError("'break' outside loop", start.line)
        self.end_statement()
        return BreakStmt(line=start.line)

    # Expressions

    def parse_expression(self) -> Node:
        return self.parse_assign()

    def parse_assign(self) -> Node:
        target = self.parse_logic_or()
        if self.match('='):
            equals = self.advance()
            value = self.parse_assign()
            if isinstance(target, (Variable, Index, Member)):
                return Assign(target, value, line=equals.line)
            raise ParseError('invalid assignment target', equals.line)
        return target

    def parse_logic_or(self) -> Node:
        left = self.parse_logic_and()
        while self.match(('||', 'or')):
            op = self.advance()
            right = self.parse_logic_and()
            left = Logical(LOGICAL_OPS[op.lexeme], left, right, line=op.line)
        return left

    def parse_logic_and(self) -> Node:
        left = self.parse_equality()
        while self.match(('&&', 'and')):
            op = self.advance()
            right = self.parse_equality()
            left = Logical(LOGICAL_OPS[op.lexeme], left, right, line=op.line)
        return left

    def _binary(self, operators: Tuple[str, ...], operand) -> Node:
        left = operand()
        while self.match(operators):
            op = self.advance()
            right = operand()
            left = BinaryOp(op.lexeme, left, right, line=op.line)
        return left

    def parse_equality(self) -> Node:
        return self._binary(('==', '!='), self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self._binary(('<', '<=', '>', '>=', 'in'), self.parse_term)

    def parse_term(self) -> Node:
        return self._binary(('+', '-'), self.parse_factor)

    def parse_factor(self) -> Node:
        return self._binary(('*', '/', '%'), self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match(('!', '-')):
            op = self.advance()
            operand = self.parse_unary()
            return UnaryOp(op.lexeme, operand, line=op.line)
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        expr = self.parse_primary()
        while True:
            if self.match('('):
                start = self.advance()
                args: List[Node] = []
                if not self.match(')'):
                    while True:
                        args.append(self.parse_expression())
                        if not self.accept(','):
                            break
                self.consume(')', "')' after arguments")
                expr = Call(expr, args, line=start.line)
            elif self.match('['):
                start = self.advance()
                index = self.parse_expression()
                self.consume(']', "']' after index")
                expr = Index(expr, index, line=start.line)
            elif self.match('.'):
                start = self.advance()
                name = self.consume(IDENTIFIER, "member name after '.'").lexeme
                expr = Member(expr, name, line=start.line)
            else:
                return expr

    def parse_primary(self) -> Node:
        token = self.peek()
        if token.kind in (NUMBER, STRING):
            self.advance()
            return Literal(token.value, line=token.line)
        if token.kind == IDENTIFIER:
            self.advance()
            return Variable(token.lexeme, line=token.line)
        if token.kind == KEYWORD:
            if token.lexeme == 'true':
                self.advance()
                return Literal(True, line=token.line)
            if token.lexeme == 'false':
                self.advance()
                return Literal(False, line=token.line)
            if token.lexeme in ('nil', 'null'):
                self.advance()
                return Literal(NIL, line=token.line)
        if self._is(token, '('):
            self.advance()
            expr = self.parse_expression()
            self.consume(')', "')' after expression")
            return Grouping(expr, line=token.line)
        if self._is(token, '['):
            return self.parse_array_lit()
        if self._is(token, '{'):
            return self.parse_dict_lit()
        raise ParseError(f"expected expression, got {token.describe()}", token.line)

    def parse_array_lit(self) -> ArrayLit:
        start = self.consume('[')
        elements: List[Node] = []
        if not self.match(']'):
            while True:
                elements.append(self.parse_expression())
                if not self.accept(','):
                    break
        self.consume(']', "']' after array elements")
        return ArrayLit(elements, line=start.line)

    def parse_dict_lit(self) -> DictLit:
        start = self.consume('{')
        entries: List[Tuple[Node, Node]] = []
        if not self.match('}'):
            while True:
                key = self.parse_expression()
                self.consume(':', "':' after dictionary key")
                value = self.parse_expression()
                entries.append((key, value))
                if not self.accept(','):
                    break
        self.consume('}', "'}' after dictionary entries")
        return DictLit(entries, line=start.line)


def parse_program(source: Union[str, List[Token]]) -> Program:
    """Parse Nea source text (or an already lexed token list) into a Program.

    Raises LexError or ParseError at the first problem; no partial AST is
    returned.
    """
    tokens = tokenize(source) if isinstance(source, str) else source
    return Parser(tokens).parse_program()
