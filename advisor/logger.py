# logger.py

import logging

from .config import LOG_LEVEL

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(pathname)s:%(lineno)d - %(funcName)s - %(message)s"


class Logger:
    """
    Configures a named logger with a single console handler.
    """

    def __init__(self, name="advisor", level=logging.INFO, format_string=DEFAULT_FORMAT):
        """
        :param name: Logger name; modules of the package share "advisor".
        :param level: Level as a number or a name such as "DEBUG".
        :param format_string: Format of the console records.
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Importing twice (tests, reloaders) must not add a second handler
        if not self.logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(level)
            console.setFormatter(logging.Formatter(format_string))
            self.logger.addHandler(console)

    def get_logger(self):
        return self.logger


logger = Logger("advisor", LOG_LEVEL.upper()).get_logger()
