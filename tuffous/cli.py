import sys
from pathlib import Path

import fncli

from . import config
from .core.errors import TuffousError
from .lib import ansi
from .lib.log import setup_logging


def main():
    cfg = config.Config(config.resolve_root())
    setup_logging(cfg.log_level())
    if not cfg.color() or not sys.stdout.isatty():
        ansi.use(ansi.PLAIN)
    fncli.autodiscover(Path(__file__).parent, "tuffous")

    user_args = sys.argv[1:] or ["list"]
    argv = ["tuffous", *user_args]
    try:
        code = fncli.dispatch(argv)
    except TuffousError as e:
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
