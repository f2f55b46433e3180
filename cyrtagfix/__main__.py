# cyrtagfix/__main__.py
import sys


def cli(argv=None):
    """
    Launcher so you can run:
      - python3 -m cyrtagfix PATH [options]
    """
    from .cli import app
    if argv is None:
        argv = sys.argv[1:]
    return app(args=argv, prog_name="cyrtagfix")


if __name__ == "__main__":
    sys.exit(cli())
