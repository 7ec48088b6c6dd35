"""Runs a Falcon-like program file, or the interactive shell when no file is given. Called from the falcon executable
script, or as python -m falconlike.main.
"""

import argparse
import sys

from falconlike.lang.engine import Engine
from falconlike.lang.error import ErrorHandler
from falconlike.lang.session import Session
from falconlike.lang.shell import Shell


def main(argv=None):
    """Runs falcon interpreter. Returns the exit status: 1 if any error was reported, else 0."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="falcon", description="Falcon-like scripting language interpreter")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--fatal", action="store_true", help="stop at the first error instead of reporting it and "
                                                                 "carrying on with the next statement")
        parser.add_argument("--max-depth", type=int, default=Engine.MAX_DEPTH, metavar="N",
                            help=f"maximum nesting of function and method calls (default: {Engine.MAX_DEPTH})")
        args = parser.parse_args(argv)

        error_handler.fatal = args.fatal
        engine = Engine(error_handler, max_depth=args.max_depth)

        if args.file is not None:
            Session(error_handler, args.file, engine).run()
        else:
            Shell(Session(error_handler, Session.SH_FILE, engine, cmd_line=True)).cmdloop()

    return 1 if error_handler.errors else 0


if __name__ == "__main__":
    sys.exit(main())
