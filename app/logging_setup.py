# app/logging_setup.py
import logging


def _resolve_level(level_name: str) -> int:
    return getattr(logging, (level_name or "INFO").upper(), logging.INFO)


def configure_logging(level_name: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    level = _resolve_level(level_name)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    root_logger = logging.getLogger()

    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return

    logging.basicConfig(level=level)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
