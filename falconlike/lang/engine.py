"""Execution engine for the Falcon-like language: walks a parsed block statement by statement.

Every statement runs on its own as far as errors go: a FalconError raised while running one is reported through the
ErrorHandler and execution continues with the next statement. Calls (functions, methods, constructors) run in their
own Scope frame, see scope.py.
"""

import math
import sys
import time

from falconlike.lang.error import EvaluationError, FalconError, MalformedStatement, ResourceError
from falconlike.lang.evaluator import Evaluator
from falconlike.lang.include import IncludeResolver
from falconlike.lang.lexical import strip_quotes
from falconlike.lang.scope import FIELD_PREFIX, Class, Function, Scope
from falconlike.lang.values import Float, Integer, String, parse_literal


CLAUSE_KEYWORDS = ("elif", "else", "case", "default")


class Engine:
    """Runs blocks against one Scope. stdout/stdin default to sys.stdout/sys.stdin at the time they are used, and
    sleep is only swapped out by tests.
    """
    MAX_DEPTH = 64     # maximum call nesting
    MAX_NESTING = 150  # maximum nesting of running blocks and calls, at up to 4 Python frames each

    def __init__(self, error_handler, scope=None, stdout=None, stdin=None, sleep=time.sleep, max_depth=MAX_DEPTH,
                 max_nesting=MAX_NESTING):
        self.error_handler = error_handler
        self.scope = scope if scope is not None else Scope()
        self.evaluator = Evaluator(self.scope)
        self.includes = IncludeResolver(error_handler)

        self.stdout = stdout
        self.stdin = stdin
        self.sleep = sleep
        self.max_depth = max_depth
        self.max_nesting = max_nesting
        self.nesting = 0  # statements currently running, innermost included

    def run(self, block, path=None):
        """Runs a whole program (or included file) from path."""
        if path is not None:
            self.error_handler.register_file(path)
        try:
            self.run_block(block)
        finally:
            if path is not None:
                self.error_handler.release_file(path)

    def run_block(self, block):
        for statement in block:
            self.run_statement(statement)

    def run_statement(self, statement):
        """Runs statement, reporting any FalconError it raises against it. A statement nested deeper than max_nesting
        (counting both blocks and calls) is not run and reported instead, so that Python's own recursion limit is
        never reached.
        """
        line = statement.line
        previous = self.error_handler.register_line(line.path, line.source, line.line_num)
        self.nesting += 1
        try:
            if self.nesting > self.max_nesting:
                raise EvaluationError("blocks and calls nest more than {} deep", str(self.max_nesting),
                                      diagnosis=False)
            getattr(self, f"_exec_{type(statement).__name__.lower()}")(statement)
        except FalconError as error:
            if error.statement is None:
                error.statement = statement
            self.error_handler.throw(error)
        finally:
            self.nesting -= 1
            self.error_handler.remove_line(line.path, previous)

    # ===== output/input =====

    def _exec_print(self, stmt):
        text = self.evaluator.interpolate(strip_quotes(stmt.text))
        print(text.replace("\\n", "\n").replace("\\t", "\t"), file=self._stdout)

    def _exec_input(self, stmt):
        print(strip_quotes(stmt.prompt), end="", file=self._stdout, flush=True)
        line = (self.stdin if self.stdin is not None else sys.stdin).readline()
        self.scope.assign(stmt.name, parse_literal(line.strip()))

    @property
    def _stdout(self):
        return self.stdout if self.stdout is not None else sys.stdout

    # ===== variables =====

    def _exec_let(self, stmt):
        self.scope.assign(stmt.name, self.evaluator.evaluate(stmt.expr))

    def _exec_const(self, stmt):
        self.scope.define_constant(stmt.name, self.evaluator.evaluate(stmt.expr))

    # ===== control flow =====

    def _exec_if(self, stmt):
        for branch in stmt.branches:
            if self._condition(branch):
                self.run_block(branch.body)
                return
        if stmt.orelse is not None:
            self.run_block(stmt.orelse.body)

    def _exec_switch(self, stmt):
        """Cases fall through: once a case matches (or a default is reached), it and every clause after it run."""
        subject = self.evaluator.evaluate(stmt.expr)
        matched = False
        for clause in stmt.clauses:
            if not matched and clause.keyword == "case":
                if not clause.expr:
                    raise MalformedStatement("'{}' expects a value", "case", statement=clause)
                matched = self.evaluator.evaluate(clause.expr) == subject
            else:
                matched = True

            if matched:
                self.run_block(clause.body)

    def _exec_for(self, stmt):
        start = self.evaluator.integer(stmt.start)
        stop = self.evaluator.integer(stmt.stop)
        for number in range(start, stop + 1):
            self.scope.assign(stmt.var, Integer(number))
            self.run_block(stmt.body)

    def _exec_repeat(self, stmt):
        count = self.evaluator.evaluate(stmt.expr)
        if not isinstance(count, Integer) or count.value < 0:
            raise ResourceError("invalid repeat count '{}'", stmt.expr)
        for __ in range(count.value):
            self.run_block(stmt.body)

    def _exec_while(self, stmt):
        while self._condition(stmt):
            self.run_block(stmt.body)

    def _exec_loopuntil(self, stmt):
        while True:
            self.run_block(stmt.body)
            if self._condition(stmt):
                break

    def _exec_sleep(self, stmt):
        duration = self.evaluator.evaluate(stmt.expr)
        if not isinstance(duration, (Integer, Float)) or not 0 <= duration.value < math.inf:
            raise ResourceError("invalid sleep time '{}'", stmt.expr)
        self.sleep(duration.value)

    def _condition(self, clause):
        """Evaluates the condition of an if/elif clause or a loop statement as an int."""
        if not clause.expr:
            raise MalformedStatement("'{}' expects a condition", clause.keyword, statement=clause)
        return self.evaluator.integer(clause.expr, clause)

    # ===== functions and classes =====

    def _exec_funcdef(self, stmt):
        self.scope.functions[stmt.name] = Function(stmt.name, stmt.params, tuple(stmt.body))

    def _exec_classdef(self, stmt):
        methods = {name: Function(name, method.params, tuple(method.body)) for name, method in stmt.methods.items()}
        self.scope.classes[stmt.name] = Class(stmt.name, methods)

    def _exec_new(self, stmt):
        cls = self.scope.resolve_class(stmt.class_name)
        init = cls.resolve("init")
        args = self._arguments(f"{cls.name}.init", init, stmt.args) if init is not None else []

        instance = self.scope.instantiate(cls)
        if init is not None:
            params = tuple(FIELD_PREFIX + param for param in init.params)
            self._call(Function(init.name, params, init.body), args, instance)

        self.scope.assign("last_instance", String(instance.name))

    def _exec_command(self, stmt):
        """Function call, else method call. Anything else is not a statement."""
        function = self.scope.functions.get(stmt.name)
        if function is not None:
            self._call(function, self._arguments(function.name, function, stmt.args))
            return

        instance, method_name = self.scope.split_method_call(stmt.name)
        if instance is not None:
            method = self.scope.resolve_class(instance.class_name).resolve(method_name)
            if method is None:
                raise EvaluationError("class '{}' has no method '{}'", (instance.class_name, method_name))
            self._call(method, self._arguments(f"{instance.class_name}.{method_name}", method, stmt.args), instance)
            return

        if stmt.name in CLAUSE_KEYWORDS:
            raise MalformedStatement("'{}' outside of the block it belongs to", stmt.name)
        raise MalformedStatement("unrecognized or malformed statement '{}'", stmt.name)

    def _arguments(self, name, function, exprs):
        """Evaluates one argument per expr. There must be at least one per parameter of function; extras are
        evaluated and dropped.
        """
        if len(exprs) < len(function.params):
            msg = "'{}' expects {} argument(s), got {}"
            raise EvaluationError(msg, (name, str(len(function.params)), str(len(exprs))))
        return [self.evaluator.evaluate(expr) for expr in exprs]

    def _call(self, function, args, instance=None):
        """Runs function in a new frame with params bound to args. If instance is given, its fields are visible as
        self_<name> variables and any self_<name> written by the call is stored back into it.
        """
        if self.scope.depth >= self.max_depth:
            msg = "maximum call depth of {} exceeded calling '{}'"
            raise EvaluationError(msg, (str(self.max_depth), function.name))

        with self.scope.frame() as frame:
            if instance is not None:
                frame.update(instance.fields)
            frame.update(zip(function.params, args))

            self.run_block(function.body)

            if instance is not None:
                instance.fields.update(self.scope.fields_of(frame))

    # ===== files =====

    def _exec_include(self, stmt):
        block = self.includes.resolve(stmt.path)
        if block is not None:
            self.run(block, stmt.path)

    def _exec_malformed(self, stmt):
        raise stmt.error
