"""smartorg sorts files in watched directories with prioritized rules.

The engine lives in :mod:`smartorg.engine`; :mod:`smartorg.cli` and
:mod:`smartorg.watch` are thin collaborators around it.
"""

from importlib import metadata as _metadata

__all__ = ["__version__"]


def __getattr__(name: str):
    # Resolved lazily so importing the package never touches installed metadata.
    if name == "__version__":
        return _metadata.version("smartorg")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])
