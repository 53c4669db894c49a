import logging

from eventhub.common.config import config

_ROOT_NAME = 'eventhub'
_FORMAT = '%(asctime)s|%(name)s.%(funcName)s|%(levelname)s: %(message)s'


def _configure_root() -> logging.Logger:
    # Configured here instead of `eventhub.__init__` to avoid a circular
    # import with `eventhub.common.config`.
    res = logging.getLogger(_ROOT_NAME)
    res.setLevel(config.log_level)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    res.addHandler(handler)
    # Lambda attaches its own handler to the root logger.
    res.propagate = False
    return res


_root = _configure_root()


def get_logger(name: str) -> logging.Logger:
    """Get the logger of a module under the configured `eventhub` logger.

    Args:
        name: The module name, eg. `__name__`.

    """
    return logging.getLogger(name)
