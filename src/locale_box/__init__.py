from __future__ import annotations

try:
    from importlib.metadata import version as _version

    # distribution 名是 locale-box，import 名是 locale_box
    __version__ = _version("locale-box")
except Exception:
    __version__ = "0.0.0"

from .models import KeyPathError, SetOutcome, SetResult  # noqa: E402
from .store import LocaleStore  # noqa: E402

__all__ = [
    "__version__",
    "KeyPathError",
    "LocaleStore",
    "SetOutcome",
    "SetResult",
]
