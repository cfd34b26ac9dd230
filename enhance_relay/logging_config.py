# enhance_relay/logging_config.py
# Console logging for the relay; called once from the app lifespan

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    # force=True replaces whatever handlers uvicorn or a previous call installed
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stdout, force=True)
    # httpx logs every Replicate poll at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
