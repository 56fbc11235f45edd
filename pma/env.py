"""`.env` loading for the API server and the operator CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import find_dotenv, load_dotenv

ENV_FILE_VARIABLE = "PMA_ENV_FILE"


def load_env(*, override: bool = False) -> List[Path]:
    """Load ``$PMA_ENV_FILE`` (when set) and the nearest ``.env`` file.

    Variables already present in the process environment win unless
    *override* is set. Returns the files that were read, in load order.
    """

    candidates: List[Path] = []
    explicit = os.getenv(ENV_FILE_VARIABLE)
    if explicit:
        candidates.append(Path(explicit).expanduser())
    found = find_dotenv(usecwd=True)
    if found:
        candidates.append(Path(found))

    loaded: List[Path] = []
    for path in candidates:
        if not path.is_file():
            continue
        resolved = path.resolve()
        if resolved in loaded:
            continue
        load_dotenv(resolved, override=override)
        loaded.append(resolved)
    return loaded
