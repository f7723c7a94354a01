import os
from pathlib import Path
from typing import Dict, Optional

ENV_FILE_VAR = "ARTE_ENV_FILE"


def parse_env_lines(text: str) -> Dict[str, str]:
    """``KEY=value`` pairs from dotenv text; ``export`` prefixes and quotes are stripped."""
    pairs: Dict[str, str] = {}
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#") or "=" not in s:
            continue
        if s.startswith("export "):
            s = s[len("export "):]
        key, val = (part.strip() for part in s.split("=", 1))
        if len(val) >= 2 and val[0] == val[-1] and val[0] in "\"'":
            val = val[1:-1]
        if key:
            pairs[key] = val
    return pairs


def load_env_file(path: Optional[Path] = None) -> Dict[str, str]:
    """Copy unset variables from the env file into ``os.environ``; returns what was applied.

    Secrets such as ``TOKEN_ENCRYPTION_KEY`` and the Polar credentials usually
    arrive this way in local development. Real environment variables win.
    """
    env_path = path or Path(os.getenv(ENV_FILE_VAR, ".env"))
    try:
        pairs = parse_env_lines(env_path.read_text(encoding="utf-8"))
    except OSError:
        return {}
    applied = {k: v for k, v in pairs.items() if k not in os.environ}
    os.environ.update(applied)
    return applied


# Tests run with whatever the environment already holds
if not os.getenv("PYTEST_CURRENT_TEST"):
    load_env_file()
