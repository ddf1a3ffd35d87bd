"""Tree-walking interpreter for the Nea language.

`Interpreter` executes statements for effect and evaluates expressions to
values against a chain of `Environment`s. Statement execution returns `None`
on normal completion or a signal object (`ReturnSignal`, `BreakSignal`) that
travels up through enclosing statements until a call or loop consumes it.
Errors are raised as `NeaError` subclasses and carry the source line.

`Interpreter.run_source` is the per-unit entry point used by the command
line and the interactive shell: it lexes, parses and runs one unit of
source against the interpreter's persistent global environment and reports
the result as an `Outcome` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional
import math

from .ast import (
    Program, ExprStmt, PrintStmt, VarDecl, Block, IfStmt, WhileStmt,
    FuncDecl, ReturnStmt, BreakStmt, Literal, Variable, Assign, BinaryOp,
    Logical, UnaryOp, Grouping, Call, ArrayLit, DictLit, Index, Member, Node,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import NeaError, NeaRuntimeError, ReturnSignal, BreakSignal, BREAK
from .lexer import tokenize
from .parser import Parser, parse_program
from .std.core import populate_core_environment
from .std.io import BasicIO, populate_io_environment
from .types import (
    NIL, ArrayVal, DictVal, FunctionVal,
    format_number, is_truthy, to_string, type_name, values_equal,
)


@dataclass
class Outcome:
    """Result of running one unit of source.

    `value` holds the value of a lone expression statement when the unit was
    run with `echo=True`; `error` holds the diagnostic if the unit failed.
    """
    value: Any = None
    error: Optional[NeaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _is_number(value: Any) -> bool:
    # bool is not a float subclass, so booleans never count as numbers
    return isinstance(value, float)


class Interpreter:
    """Core interpreter that executes a Nea AST."""
    def __init__(self, io: Optional[BasicIO] = None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.io = io if io is not None else BasicIO()
        self.builtins = Environment()
        self.global_env = Environment(parent=self.builtins)
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.line = 0
        self.load_standard_module()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def load_standard_module(self):
        self.builtins.values.update(populate_core_environment().values)
        self.builtins.values.update(populate_io_environment(self.io).values)

    # Public API

    def run_source(self, source: str, echo: bool = False) -> Outcome:
        """Lex, parse and run one unit of source, reporting errors in the Outcome.

        Already performed side effects (printed output, mutated globals) are
        kept when a unit fails part way.
        """
        try:
            tokens = tokenize(source)
            if self.debug_level >= 4:
                self.debug('tokens: ' + ' '.join(f"{t.kind}:{t.lexeme!r}@{t.line}" for t in tokens))
            program = Parser(tokens).parse_program()
            if self.debug_level >= 1:
                self.debug(f"run unit: {len(program.body)} statement(s)")
            if echo and len(program.body) == 1:
                stmt = program.body[0]
                if isinstance(stmt, ExprStmt) and not isinstance(stmt.expr, Assign):
                    self.line = stmt.line
                    value = self._guard(lambda: self.evaluate(stmt.expr, self.global_env))
                    return Outcome(value=value)
            self.run(program)
            return Outcome()
        except NeaError as e:
            if self.debug_level >= 1:
                self.debug(f"error: {e}")
            return Outcome(error=e)

    def run(self, program: Program, env: Optional[Environment] = None) -> None:
        """Execute a whole program, raising NeaError on the first failure."""
        if env is None:
            env = self.global_env
        self._guard(lambda: self.execute_block(program.body, env))

    def _guard(self, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except RecursionError:
            raise NeaRuntimeError('stack overflow', self.line) from None

    # Statements

    def execute_block(self, statements: List[Node], env: Environment) -> Any:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return/break signals
            if result is not None:
                return result
        return None

    def execute(self, node: Node, env: Environment) -> Any:
        self.line = getattr(node, 'line', self.line)
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, env)
            return None
        if isinstance(node, PrintStmt):
            value = self.evaluate(node.expr, env)
            self.io.write_line(to_string(value))
            return None
        if isinstance(node, VarDecl):
            value = self.evaluate(node.expr, env) if node.expr is not None else NIL
            env.declare(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, Block):
            return self.execute_block(node.statements, Environment(parent=env))
        if isinstance(node, IfStmt):
            cond = self.evaluate(node.condition, env)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"line {node.line}: if condition {to_string(cond)} -> {truthy}")
            if truthy:
                return self.execute(node.then_branch, env)
            if node.else_branch is not None:
                return self.execute(node.else_branch, env)
            return None
        if isinstance(node, WhileStmt):
            while True:
                cond = self.evaluate(node.condition, env)
                if not is_truthy(cond):
                    break
                res = self.execute(node.body, env)
                if isinstance(res, BreakSignal):
                    if self.debug_level >= 3:
                        self.debug(f"line {node.line}: break")
                    break
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, FuncDecl):
            env.declare(node.name, FunctionVal(node.name, node.params, node.body, env))
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return None
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value, env) if node.value is not None else NIL
            return ReturnSignal(value)
        if isinstance(node, BreakStmt):
            return BREAK
        raise NeaRuntimeError(f"unexpected node {type(node).__name__}", getattr(node, 'line', self.line))

    # Expressions

    def evaluate(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return env.get(node.name, node.line)
        if isinstance(node, Grouping):
            return self.evaluate(node.expr, env)
        if isinstance(node, ArrayLit):
            return ArrayVal([self.evaluate(el, env) for el in node.elements])
        if isinstance(node, DictLit):
            result = DictVal()
            for key_node, val_node in node.entries:
                key = self.evaluate(key_node, env)
                val = self.evaluate(val_node, env)
                self.store_key(result, key, val, key_node.line)
            return result
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, env)
            if node.op == '!':
                return not is_truthy(operand)
            if node.op == '-':
                if _is_number(operand):
                    return -operand
                raise NeaRuntimeError(f"operand of '-' must be a Number, got {type_name(operand)}", node.line)
            raise NeaRuntimeError(f"unsupported unary operator {node.op}", node.line)
        if isinstance(node, Logical):
            left = self.evaluate(node.left, env)
            # Short-circuit: the right operand is only evaluated when needed
            if node.op == '&&':
                if not is_truthy(left):
                    return False
                return is_truthy(self.evaluate(node.right, env))
            if is_truthy(left):
                return True
            return is_truthy(self.evaluate(node.right, env))
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right, node.line)
        if isinstance(node, Assign):
            return self.assign_lvalue(node.target, node.value, env)
        if isinstance(node, Index):
            target = self.evaluate(node.target, env)
            index = self.evaluate(node.index, env)
            return self.index_value(target, index, node.line)
        if isinstance(node, Member):
            target = self.evaluate(node.target, env)
            if not isinstance(target, DictVal):
                raise NeaRuntimeError(f"cannot access member '{node.name}' on {type_name(target)}", node.line)
            return self.index_value(target, node.name, node.line)
        if isinstance(node, Call):
            func = self.evaluate(node.callee, env)
            args = [self.evaluate(arg, env) for arg in node.args]
            return self.call_function(func, args, node.line)
        raise NeaRuntimeError(f"unexpected node {type(node).__name__}", getattr(node, 'line', self.line))

    def assign_lvalue(self, target: Node, value_node: Node, env: Environment) -> Any:
        if isinstance(target, Variable):
            value = self.evaluate(value_node, env)
            env.assign(target.name, value, target.line)
            return value
        if isinstance(target, Index):
            container = self.evaluate(target.target, env)
            idx = self.evaluate(target.index, env)
            value = self.evaluate(value_node, env)
            if isinstance(container, ArrayVal):
                i = self.array_index(len(container.items), idx, target.line)
                container.items[i] = value
                return value
            if isinstance(container, DictVal):
                self.store_key(container, idx, value, target.line)
                return value
            raise NeaRuntimeError(f"cannot assign to index on {type_name(container)}", target.line)
        if isinstance(target, Member):
            container = self.evaluate(target.target, env)
            value = self.evaluate(value_node, env)
            if isinstance(container, DictVal):
                container.set(target.name, value)
                return value
            raise NeaRuntimeError(f"cannot assign member '{target.name}' on {type_name(container)}", target.line)
        raise NeaRuntimeError('invalid assignment target', getattr(target, 'line', self.line))

    def call_function(self, func: Any, args: List[Any], line: int) -> Any:
        if isinstance(func, BuiltinFunction):
            # Check arity; None means the builtin validates its own arguments
            if func.arity is not None and len(args) != func.arity:
                raise NeaRuntimeError(f"{func.name} expects {func.arity} arguments, got {len(args)}", line)
            if self.debug_level >= 1:
                self.debug(f"line {line}: call builtin {func.name}")
            try:
                return func.fn(args)
            except NeaRuntimeError as ex:
                if ex.line:
                    raise
                raise NeaRuntimeError(ex.message, line) from None
        if isinstance(func, FunctionVal):
            if len(args) != func.arity:
                raise NeaRuntimeError(f"{func.name} expects {func.arity} arguments, got {len(args)}", line)
            if self.debug_level >= 1:
                self.debug(f"line {line}: call {func.name}({', '.join(to_string(a) for a in args)})")
            # The call scope hangs off the closure, not the caller's scope
            call_env = Environment(parent=func.closure)
            for param, arg in zip(func.params, args):
                call_env.declare(param, arg)
            res = self.execute_block(func.body.statements, call_env)
            if isinstance(res, ReturnSignal):
                return res.value
            return NIL
        raise NeaRuntimeError(f"can only call functions, got {type_name(func)}", line)

    # Operators and containers

    def apply_binary_op(self, op: str, a: Any, b: Any, line: int) -> Any:
        if op == '+':
            # If either operand is a string, perform concatenation
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            if _is_number(a) and _is_number(b):
                return a + b
            raise NeaRuntimeError(
                f"operands of '+' must be numbers or include a string, got {type_name(a)} and {type_name(b)}", line)
        if op in ('-', '*', '/', '%'):
            if not (_is_number(a) and _is_number(b)):
                raise NeaRuntimeError(
                    f"operands of '{op}' must be numbers, got {type_name(a)} and {type_name(b)}", line)
            if op == '-':
                return a - b
            if op == '*':
                return a * b
            if op == '/':
                if b == 0.0:
                    raise NeaRuntimeError('division by zero', line)
                return a / b
            if b == 0.0:
                raise NeaRuntimeError('modulo by zero', line)
            # remainder truncates toward zero, like C
            if math.isinf(a):
                return math.nan
            return math.fmod(a, b)
        if op == '==':
            return values_equal(a, b)
        if op == '!=':
            return not values_equal(a, b)
        if op in ('<', '>', '<=', '>='):
            if not ((_is_number(a) and _is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
                raise NeaRuntimeError(
                    f"cannot compare {type_name(a)} and {type_name(b)} with '{op}'", line)
            if op == '<':
                return a < b
            if op == '>':
                return a > b
            if op == '<=':
                return a <= b
            return a >= b
        if op == 'in':
            return self.contains(b, a, line)
        raise NeaRuntimeError(f"unknown operator {op}", line)

    def contains(self, container: Any, item: Any, line: int) -> bool:
        if isinstance(container, ArrayVal):
            return any(values_equal(item, x) for x in container.items)
        if isinstance(container, DictVal):
            try:
                return container.contains(item)
            except TypeError as e:
                raise NeaRuntimeError(str(e), line)
        if isinstance(container, str):
            if not isinstance(item, str):
                raise NeaRuntimeError(f"'in <String>' requires a String on the left, got {type_name(item)}", line)
            return item in container
        raise NeaRuntimeError(f"'in' is not supported for {type_name(container)}", line)

    def array_index(self, length: int, index: Any, line: int) -> int:
        if not _is_number(index):
            raise NeaRuntimeError(f"array index must be a Number, got {type_name(index)}", line)
        if not index.is_integer():
            raise NeaRuntimeError(f"array index must be an integer, got {format_number(index)}", line)
        i = int(index)
        if i < 0 or i >= length:
            raise NeaRuntimeError(f"index out of range ({format_number(index)} for length {length})", line)
        return i

    def index_value(self, container: Any, index: Any, line: int) -> Any:
        if isinstance(container, ArrayVal):
            return container.items[self.array_index(len(container.items), index, line)]
        if isinstance(container, DictVal):
            try:
                return container.get(index)
            except KeyError:
                raise NeaRuntimeError(f"key not found: {to_string(index)}", line) from None
            except TypeError as e:
                raise NeaRuntimeError(str(e), line)
        if isinstance(container, str):
            return container[self.array_index(len(container), index, line)]
        raise NeaRuntimeError(f"cannot index {type_name(container)}", line)

    def store_key(self, container: DictVal, key: Any, value: Any, line: int) -> None:
        try:
            container.set(key, value)
        except TypeError as e:
            raise NeaRuntimeError(str(e), line)


def run_program(source: str, io: Optional[BasicIO] = None, debug_level: int = 0) -> Interpreter:
    """Convenience function to parse and run a Nea program from source text.

    Raises the first LexError, ParseError or NeaRuntimeError encountered and
    returns the interpreter so callers can inspect its globals.
    """
    ast_program = parse_program(source)
    interpreter = Interpreter(io=io, debug_level=debug_level)
    try:
        interpreter.run(ast_program)
    finally:
        interpreter.close()
    return interpreter
