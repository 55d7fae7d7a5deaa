import os
from datetime import timedelta
from pathlib import Path
from typing import Dict

from errors import ConfigError

# Paths
BASE_DIR = Path(__file__).parent
ENV_FILE = BASE_DIR / ".env"


def load_env_file(path: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines, skipping blanks and comments."""
    env: Dict[str, str] = {}
    if not path.exists():
        return env
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        env[key.strip()] = value.strip()
    return env


def write_env_file(path: Path, values: Dict[str, str]) -> None:
    lines = [f"{key}={value}" for key, value in values.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    try:
        path.chmod(0o600)
    except OSError:
        pass


def parse_port(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"PORT must be a number, got {value!r}") from None


def _setting(name: str, default=None):
    # Real environment variables win over the .env file
    return os.getenv(name, _ENV.get(name, default))


_ENV = load_env_file(ENV_FILE)

DATA_DIR = Path(_setting("DATA_DIR", os.getcwd()))
USERS_PATH = DATA_DIR / "users.json"
POSTS_PATH = DATA_DIR / "posts.json"

# Site metadata
SITE_TITLE = "inkwell"
SITE_DESCRIPTION = "Stories, notes and the occasional rant"

# Auth / session
SESSION_SECRET = _setting("SESSION_SECRET")
SECRET_KEY = _setting("SECRET_KEY")
SESSION_LIFETIME = timedelta(hours=24)

# Server
PORT = parse_port(_setting("PORT", 3000))

# Content
DEFAULT_PROFILE_PICTURE = "/static/images/test.jpg"
DEFAULT_POST_IMAGE = "/static/images/user.png"
TRENDING_COUNT = 7
EXCERPT_LENGTH = 100
