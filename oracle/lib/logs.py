import logging

from . import config

FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup(level: str | None = None) -> None:
    """Configure root logging from config unless an explicit level is given."""
    level_name = (level or config.get("logging_level", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=FORMAT)
