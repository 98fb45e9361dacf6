import logging
import os

import structlog


def get_logger():
    """
    Get a logger instance with the specified log level.

    Set a log level using the EXIFGPS_LOG_LEVEL environment variable. For example:

    ```
    export EXIFGPS_LOG_LEVEL=DEBUG
    exifgps extract ./photos
    ```

    or

    ```
    EXIFGPS_LOG_LEVEL=WARNING exifgps extract ./photos
    ```

    The level is read from the environment rather than the Settings class
    so that modules imported by the settings can log too.
    """
    log_level = logging.getLevelName(os.environ.get("EXIFGPS_LOG_LEVEL", "INFO"))

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    logger = structlog.get_logger()
    return logger


logger = get_logger()
