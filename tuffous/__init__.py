__version__ = "0.1.0"


def version() -> str:
    return __version__
