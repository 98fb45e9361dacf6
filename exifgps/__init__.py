from .common import constants, utils
from .common.logs import logger

__all__ = [
    "logger",
    "utils",
    "constants",
]
