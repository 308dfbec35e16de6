import logging


def configure_logging(level: str = "INFO") -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )
    return logging.getLogger("hazardhub")
