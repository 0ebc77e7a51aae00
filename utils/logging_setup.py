import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Configure root logging once at startup. Unknown level names fall back to INFO."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # matplotlib's font manager is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(max(level, logging.WARNING))
