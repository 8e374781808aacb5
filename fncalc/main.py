"""Runs fncalc script files or the interactive shell, under the error handling context manager. Called from the
fncalc console script.
"""

import argparse

from fncalc.lang.error import ErrorHandler
from fncalc.lang.session import Session
from fncalc.lang.shell import Shell
from fncalc.pure.evaluator import Evaluator


def main(argv=None):
    """Runs fncalc interpreter. Called from fncalc console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="fncalc", description="calculator language with first-class functions")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--max-depth", type=int, default=Evaluator.MAX_DEPTH,
                            help=f"maximum evaluation depth before giving up (default: {Evaluator.MAX_DEPTH})")
        args = parser.parse_args(argv)

        if args.file is not None:
            sess = Session(error_handler, args.file, max_depth=args.max_depth)
            for result in sess.run():
                print(result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, max_depth=args.max_depth)).cmdloop()


if __name__ == "__main__":
    main()
