import logging

from anchors.app_config import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level=None):
    """Configure the root logger once per process.

    Streamlit re-executes the entry script on every interaction, so repeated
    calls must not stack handlers.
    """
    root = logging.getLogger()
    level_name = (level or LOG_LEVEL or "INFO").upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if any(getattr(h, "_simtrack", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._simtrack = True
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
