"""Lexical analysis and parsing for the Falcon-like language. Source is line-oriented: every line is one statement,
whose first whitespace-delimited token is its keyword. Lines are parsed once, into a tree of blocks:

```
<block>      ::= <statement>*                         ; ends at the "end" matching its opener
<statement>  ::= "print" <text>
               | "let" <name> "=" <expr>
               | "const" <name> "=" <expr>
               | "input" <name> <prompt>?
               | "class" <name> <func>* "end"
               | "new" <class> <arg>*
               | "sleep" <expr>
               | "if" <expr> <block> ("elif" <expr> <block>)* ("else" <block>)? "end"
               | "switch" <expr> ("case" <expr> <block> | "default" <block>)* "end"
               | "for" <name> "=" <arg> "to" <arg> <block> "end"
               | "repeat" <expr> <block> "end"
               | "while" <expr> <block> "end"
               | "loopuntil" <expr> <block> "end"
               | "func" <name> <param>* <block> "end"
               | "include" <path>
               | <callable> <arg>*                    ; function, or <instance>_<method>

<comment>    ::= "#" <char>*                          ; whole line only
```

Expressions are never split further: an <expr> is a single token or a single quoted string.
"""

import re
from abc import ABC
from collections import namedtuple

from falconlike.lang.error import FalconError, MalformedStatement


IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
COMMENT = "#"
SEPARATORS = ":,"

Line = namedtuple("Line", ["path", "line_num", "source"])


def tokenize(line):
    """Splits line into its non-empty whitespace-delimited tokens. Quotes are not special here."""
    return line.split()


def strip_quotes(text):
    """Strips one surrounding pair of double quotes from text, if it has them."""
    if len(text) >= 2 and text.startswith("\"") and text.endswith("\""):
        return text[1:-1]
    return text


def is_comment(tokens):
    return bool(tokens) and tokens[0].startswith(COMMENT)


class Statement(ABC):
    """Superclass representing any statement in the Falcon-like language. Subclasses with a keyword are inferred by
    Parser from the first token of a line.
    """
    keyword = None
    usage = ""
    min_tokens = 1
    opens_block = False

    def __init__(self, tokens, line):
        """Assumes check_grammar has been run."""
        self.tokens = tokens
        self.line = line
        self._cls = type(self).__name__

    @classmethod
    def check_grammar(cls, tokens):
        """Returns whether tokens start with this statement's keyword, and raises a MalformedStatement if they do but
        the rest of the line doesn't fit.
        """
        if cls.keyword is None or tokens[0] != cls.keyword:
            return False
        if len(tokens) < cls.min_tokens or not cls.check_shape(tokens):
            raise MalformedStatement("'{}' expects " + cls.usage, cls.keyword)
        return True

    @staticmethod
    def check_shape(tokens):
        """Checks everything after the keyword. Only called once tokens has at least min_tokens tokens."""
        return True

    def parse_body(self, parser):
        """Consumes this statement's child blocks from parser. Only called if opens_block."""

    def __repr__(self):
        return f"{self._cls}('{self.line.source.strip()}')"


class Clause:
    """Part of an if/switch statement: the if/elif/else/case/default line and the block it guards. expr is None for
    else and default.
    """

    def __init__(self, keyword, expr, body, line):
        self.keyword = keyword
        self.expr = expr
        self.body = body
        self.line = line

    def __repr__(self):
        return f"Clause('{self.line.source.strip()}', {len(self.body)} statement(s))"


class Print(Statement):
    keyword = "print"

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.text = " ".join(tokens[1:])


class Let(Statement):
    keyword = "let"
    usage = "NAME = EXPR"
    min_tokens = 4

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.name = tokens[1]
        self.expr = " ".join(tokens[3:])

    @staticmethod
    def check_shape(tokens):
        return tokens[2] == "=" and IDENTIFIER.fullmatch(tokens[1]) is not None


class Const(Let):
    keyword = "const"


class Input(Statement):
    keyword = "input"
    usage = "NAME [PROMPT]"
    min_tokens = 2

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.name = tokens[1]
        self.prompt = " ".join(tokens[2:])

    @staticmethod
    def check_shape(tokens):
        return IDENTIFIER.fullmatch(tokens[1]) is not None


class New(Statement):
    keyword = "new"
    usage = "CLASS [ARGS]"
    min_tokens = 2

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.class_name = tokens[1]
        self.args = tokens[2:]


class Include(Statement):
    keyword = "include"
    usage = "\"PATH\""
    min_tokens = 2

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.path = " ".join(tokens[1:]).strip("\"")


class Expression(Statement):
    """Statement made of its keyword and one expression: the rest of the line."""
    min_tokens = 2

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.expr = " ".join(tokens[1:])


class Sleep(Expression):
    keyword = "sleep"
    usage = "SECONDS"


class Loop(Expression):
    """Expression statement guarding a block that ends with "end"."""
    opens_block = True

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.body = []

    def parse_body(self, parser):
        self.body, __ = parser.body(self)


class Repeat(Loop):
    keyword = "repeat"
    usage = "COUNT"


class While(Loop):
    keyword = "while"
    usage = "CONDITION"


class LoopUntil(Loop):
    keyword = "loopuntil"
    usage = "CONDITION"


class If(Expression):
    keyword = "if"
    usage = "CONDITION"
    opens_block = True

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.branches = []  # if/elif Clauses, in source order
        self.orelse = None  # else Clause

    def parse_body(self, parser):
        body, terminator = parser.body(self, ("elif", "else", "end"))
        self.branches.append(Clause(self.keyword, self.expr, body, self.line))

        while terminator is not None and terminator.tokens[0] == "elif":
            expr = " ".join(terminator.tokens[1:])
            body, next_terminator = parser.body(self, ("elif", "else", "end"))
            self.branches.append(Clause("elif", expr, body, terminator.line))
            terminator = next_terminator

        if terminator is not None and terminator.tokens[0] == "else":
            body, __ = parser.body(self)
            self.orelse = Clause("else", None, body, terminator.line)


class Switch(Expression):
    keyword = "switch"
    usage = "EXPR"
    opens_block = True

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.clauses = []  # case/default Clauses, in source order

    def parse_body(self, parser):
        ignored, terminator = parser.body(self, ("case", "default", "end"))
        for statement in ignored:
            parser.warn(FalconError("statements before the first 'case' of a switch never run", statement=statement,
                                    diagnosis=False))

        while terminator is not None and terminator.tokens[0] != "end":
            keyword = terminator.tokens[0]
            expr = " ".join(terminator.tokens[1:]) if keyword == "case" else None
            body, next_terminator = parser.body(self, ("case", "default", "end"))
            self.clauses.append(Clause(keyword, expr, body, terminator.line))
            terminator = next_terminator


class For(Statement):
    keyword = "for"
    usage = "VAR = START to END"
    min_tokens = 6
    opens_block = True

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.var = tokens[1]
        self.start = tokens[3]
        self.stop = tokens[5]
        self.body = []

    @staticmethod
    def check_shape(tokens):
        return tokens[2] == "=" and tokens[4] == "to" and IDENTIFIER.fullmatch(tokens[1]) is not None

    def parse_body(self, parser):
        self.body, __ = parser.body(self)


class FuncDef(Statement):
    keyword = "func"
    usage = "NAME [PARAMS]"
    min_tokens = 2
    opens_block = True

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.name = tokens[1]
        self.params = tuple(param for param in (token.strip(SEPARATORS) for token in tokens[2:]) if param)
        self.body = []

    def parse_body(self, parser):
        self.body, __ = parser.body(self)


class ClassDef(Statement):
    keyword = "class"
    usage = "NAME"
    min_tokens = 2
    opens_block = True

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.name = tokens[1]
        self.methods = {}  # name: FuncDef

    def parse_body(self, parser):
        body, __ = parser.body(self)
        for statement in body:
            if isinstance(statement, FuncDef):
                self.methods[statement.name] = statement
            else:
                parser.warn(FalconError("only methods belong in class '{}'; ignoring this line", self.name,
                                        statement=statement, diagnosis=False))


class Command(Statement):
    """Any line without a keyword: a function call, a method call, or nothing the language knows."""

    def __init__(self, tokens, line):
        super().__init__(tokens, line)
        self.name = tokens[0]
        self.args = tokens[1:]


class Malformed(Statement):
    """Stands in for a statement that failed check_grammar. Running it reports error."""

    def __init__(self, tokens, line, error):
        super().__init__(tokens, line)
        self.error = error


Terminator = namedtuple("Terminator", ["tokens", "line"])


class Parser:
    """Parses source lines into a block (list of Statements) in one pass, keeping track of the current line."""

    def __init__(self, lines, path, error_handler=None, first_line_num=1):
        lines = enumerate(lines, first_line_num)
        self.lines = [Line(path, line_num, line.rstrip("\r\n")) for line_num, line in lines]
        self.path = path
        self.error_handler = error_handler  # parse warnings are dropped if None
        self.index = 0

    def parse(self):
        """Parses all lines. An "end" with no block to close ends the program."""
        statements, terminator = self.block(("end",))
        if terminator is not None:
            self.warn(FalconError("'{}' has no block to close; the rest of '{}' is ignored", ("end", self.path),
                                  statement=terminator))
        return statements

    def block(self, terminators):
        """Parses statements up to and including the next line whose keyword is in terminators. Returns the statements
        and the Terminator line, or None as terminator if the lines ran out first.
        """
        statements = []
        while self.index < len(self.lines):
            line = self.lines[self.index]
            tokens = tokenize(line.source)
            self.index += 1

            if not tokens or is_comment(tokens):
                continue
            if tokens[0] in terminators:
                return statements, Terminator(tokens, line)

            statements.append(self.statement(tokens, line))

        return statements, None

    def body(self, opener, terminators=("end",)):
        """Parses the child block of opener, warning if it is never closed."""
        statements, terminator = self.block(terminators)
        if terminator is None:
            self.warn(FalconError("'{}' block is never closed with 'end'", opener.tokens[0], statement=opener))
        return statements, terminator

    def statement(self, tokens, line):
        """Infers the statement on line from its tokens, parsing its child blocks if it has any."""
        for subclass in _statement_classes():
            try:
                matched = subclass.check_grammar(tokens)
            except MalformedStatement as error:
                malformed = Malformed(tokens, line, error)
                if subclass.opens_block:
                    self.body(malformed)  # skip the body so its "end" doesn't close the enclosing block
                return malformed

            if matched:
                statement = subclass(tokens, line)
                if statement.opens_block:
                    statement.parse_body(self)
                return statement

        return Command(tokens, line)

    def warn(self, error):
        if self.error_handler is not None:
            self.error_handler.warn(error)


def _statement_classes():
    """All Statement subclasses with a keyword."""

    def _subclasses(cls):
        for subclass in cls.__subclasses__():
            yield subclass
            yield from _subclasses(subclass)

    return [subclass for subclass in _subclasses(Statement) if subclass.keyword is not None]


def parse(lines, path, error_handler=None, first_line_num=1):
    """Parses lines (from the file at path, starting at first_line_num) into a block."""
    return Parser(lines, path, error_handler, first_line_num).parse()


def block_depth(lines):
    """Number of blocks opened in lines that are still waiting for their "end"."""
    openers = {subclass.keyword for subclass in _statement_classes() if subclass.opens_block}
    depth = 0
    for line in lines:
        tokens = tokenize(line)
        if not tokens or is_comment(tokens):
            continue
        if tokens[0] in openers:
            depth += 1
        elif tokens[0] == "end":
            depth = max(depth - 1, 0)
    return depth
