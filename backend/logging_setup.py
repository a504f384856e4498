import logging
import sys

_HANDLER_NAME = "todo-console"


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a single stderr handler to the root logger.
    Safe to call more than once: an existing handler is reused.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(level)
            return

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(fmt)
    root.addHandler(handler)

    # The anthropic/httpx clients log every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
