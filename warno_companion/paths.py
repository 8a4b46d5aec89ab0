from __future__ import annotations

from pathlib import Path

# Both packages sit side by side under the checkout root
_CHECKOUT_MARKERS = ("pyproject.toml", "warno_companion", "warno_descriptor_extractor")


def get_repo_root(start: Path | None = None) -> Path:
    """Directory that holds ``.env`` and the optional ``bin/ndf-parser``.

    Running from a checkout, that is the checkout root. An installed
    ``warno-ndf-to-json`` is usually run from a folder of exported game
    files, so outside a checkout the current working directory is used.
    """
    here = (start or Path(__file__)).resolve()
    for parent in [here.parent, *here.parents]:
        if all((parent / marker).exists() for marker in _CHECKOUT_MARKERS):
            return parent
    return Path.cwd()
