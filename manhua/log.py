from __future__ import annotations

_VERBOSE = False  # Global flag for standard verbose output
_DEBUG = False  # Global flag for debug-level output


def set_verbosity(verbose: bool = False, debug: bool = False) -> None:
    global _VERBOSE, _DEBUG
    _VERBOSE = verbose
    _DEBUG = debug


def log_verbose(*args, **kwargs):
    """Prints if --verbose or --debug is set."""
    if _VERBOSE or _DEBUG:
        print(*args, **kwargs)


def log_debug(*args, **kwargs):
    """Prints only if --debug is set."""
    if _DEBUG:
        print(*args, **kwargs)
