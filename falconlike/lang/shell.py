"""Handles interactive/command-line mode for the Falcon-like interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Falcon-like interpreter shell."""
    intro = "Falcon-like interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used while a block is open
    _tmp_prompt = "> "       # also used for prompt swapping in open blocks

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess

    def default(self, line):
        """Executes arbitrary Falcon-like statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.add(line)
        self.prompt = self.secondary_prompt if self.sess.pending else self._tmp_prompt

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Falcon-like interpreter!\n\n"
              "Each line is one statement: print, let, const, input, if/elif/else, switch/case,\n"
              "for, repeat, while, loopuntil, func, class/new, sleep and include. Blocks end\n"
              "with 'end', and the shell waits for it before running the block.\n\n"
              "Try it out by typing 'let name = \"World\"', then 'print \"Hello ${name}!\"'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
