import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "stock_api"


def setup_logging(level: str = "INFO") -> None:
    """Un solo handler a stdout; llamarlo dos veces no duplica líneas."""
    root = logging.getLogger()
    root.setLevel(level)

    for h in root.handlers:
        if h.get_name() == HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.set_name(HANDLER_NAME)
    root.addHandler(handler)

    # httpx loguea cada request en INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
