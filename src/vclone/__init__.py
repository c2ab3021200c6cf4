"""vclone - clone your voice and speak with it from the command line."""

__version__ = "0.1.0"
__all__ = ["clone", "speak"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "clone":
        from .api import clone

        return clone
    if name == "speak":
        from .api import speak

        return speak
    raise AttributeError(f"module 'vclone' has no attribute {name!r}")
