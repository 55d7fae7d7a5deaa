"""
One-time helper that writes the session secret and the email encryption
key to the .env file read at startup.

Usage:
    python generate_secrets.py [--env-file .env] [--port 3000] [--force]

Rotating SECRET_KEY makes every stored email undecryptable, so an existing
key is only replaced with --force.
"""

import argparse
import secrets
from pathlib import Path
from typing import Dict

import config

KEY_BYTES = 32


def generate_key(length: int = KEY_BYTES) -> str:
    return secrets.token_hex(length)


def generate_secrets(port: int = 3000) -> Dict[str, str]:
    return {
        "SESSION_SECRET": generate_key(),
        "SECRET_KEY": generate_key(),
        "PORT": str(port),
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate .env secrets")
    parser.add_argument(
        "--env-file",
        default=str(config.ENV_FILE),
        help="Where to write the secrets",
    )
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing SECRET_KEY",
    )
    args = parser.parse_args(argv)

    env_path = Path(args.env_file)
    existing = config.load_env_file(env_path)
    if existing.get("SECRET_KEY") and not args.force:
        raise SystemExit(
            f"{env_path} already has a SECRET_KEY; pass --force to replace it"
        )

    existing.update(generate_secrets(args.port))
    config.write_env_file(env_path, existing)
    print(f"{env_path} created/updated with new secrets")


if __name__ == "__main__":
    main()
