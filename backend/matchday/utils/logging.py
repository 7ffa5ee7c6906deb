import logging

from matchday.config import config


def create_logger(level: int) -> logging.Logger:
    log_format = "[%(asctime)s] [%(name)s] [%(process)d] [%(levelname)s] %(message)s"
    formatter = logging.Formatter(fmt=log_format, datefmt="%Y-%m-%d %H:%M:%S")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    logger = logging.getLogger("matchday")
    logger.setLevel(level)
    if not logger.handlers:
        logger.addHandler(stream_handler)

    return logger


logger = create_logger(logging.getLevelName(config.log_level.upper()))
