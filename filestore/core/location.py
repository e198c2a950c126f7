from __future__ import annotations

import os
import urllib.parse
from pathlib import Path
from urllib.request import url2pathname

Location = str | os.PathLike[str]


def resolve_location(location: Location) -> Path:
    """
    Turn a path or a ``file://`` URI into a local Path.

    Only local files are addressable: any other scheme is rejected.
    Nothing is normalised beyond that (no ``~`` expansion, no resolve()).
    """
    if isinstance(location, os.PathLike):
        return Path(location)
    if not isinstance(location, str):
        raise TypeError(f"location must be a str or os.PathLike, not {type(location).__name__}")
    if not location:
        raise ValueError("location must not be empty")
    if "://" not in location:
        return Path(location)

    parsed = urllib.parse.urlparse(location)
    if parsed.scheme.lower() != "file":
        raise ValueError(f"unsupported location scheme {parsed.scheme!r}: only file:// is allowed")
    if parsed.netloc not in ("", "localhost"):
        raise ValueError(f"remote file host {parsed.netloc!r} is not supported")
    if not parsed.path:
        raise ValueError(f"file URI without a path: {location!r}")
    # url2pathname fait aussi le décodage des %xx
    return Path(url2pathname(parsed.path))
