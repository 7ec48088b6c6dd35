"""Session control for the Falcon-like language: runs a program file, or takes lines one by one in command-line mode
and runs them as soon as every block they open is closed.
"""

from falconlike.lang.engine import Engine
from falconlike.lang.error import FalconError
from falconlike.lang.include import read_source
from falconlike.lang.lexical import block_depth, parse


class Session:
    """Governs a Falcon-like session. All state (variables, functions, classes, included files) lives in the engine
    and is kept for the whole session.
    """
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, engine=None, cmd_line=False):
        self.error_handler = error_handler
        self.engine = engine if engine is not None else Engine(error_handler)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.lines = []    # program lines, or lines waiting for their blocks to close in command-line mode
        self.line_num = 0  # lines taken so far in command-line mode

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.lines = read_source(path)
            self.engine.includes.mark(path)  # including the running file again is a no-op

        elif not cmd_line:
            raise FalconError("'<in>' is a reserved filename")

    @property
    def pending(self):
        """Whether lines are waiting for the "end" of a block."""
        return bool(self.lines) and block_depth(self.lines) > 0

    def add(self, line):
        """Adds a line in command-line mode. Once no block is left open, the lines added so far are parsed and run.
        Returns whether the line was run.
        """
        self.line_num += 1
        self.lines.append(line)
        if self.pending:
            return False

        lines, self.lines = self.lines, []
        block = parse(lines, self.path, self.error_handler, self.line_num - len(lines) + 1)
        self.engine.run(block, self.path)
        return True

    def run(self):
        """Runs this session's program file."""
        self.engine.run(parse(self.lines, self.path, self.error_handler), self.path)
