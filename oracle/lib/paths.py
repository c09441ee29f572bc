import os
from pathlib import Path


def oracle_home() -> Path:
    override = os.environ.get("ORACLE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".oracle"


def package_root() -> Path:
    return Path(__file__).resolve().parent.parent


def database(name: str) -> Path:
    return oracle_home() / name
