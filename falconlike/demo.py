"""Runs a small sample program through a command-line session, a line at a time. Run as python -m falconlike.demo."""

from falconlike.lang.error import ErrorHandler
from falconlike.lang.session import Session


PROGRAM = [
    "print \"Hello from Falcon\"",
    "const greeting = \"Welcome\"",
    "let name = \"World\"",
    "print \"${greeting}, ${name}!\"",
    "func countdown from",
    "    for i = 1 to from",
    "        print \"\\t${i}\"",
    "    end",
    "end",
    "countdown 3",
    "class Counter",
    "    func init start",
    "        print \"counter starts at ${self_start}\"",
    "    end",
    "end",
    "new Counter 10",
    "switch 2",
    "    case 1",
    "        print \"one\"",
    "    case 2",
    "        print \"two\"",
    "    default",
    "        print \"and everything after\"",
    "end",
]


def main():
    with ErrorHandler() as error_handler:
        sess = Session(error_handler, Session.SH_FILE, cmd_line=True)
        for line in PROGRAM:
            sess.add(line)
    return error_handler


if __name__ == "__main__":
    main()
