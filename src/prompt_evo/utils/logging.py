"""日志配置 / Logging setup"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "prompt_evo"


def setup_logging(
    level: str = "INFO",
    rich: bool = True,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    初始化 prompt_evo 日志 / Initialize prompt_evo logging

    Args:
        level: 日志级别 / Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rich: 是否使用 rich 渲染 / Render through rich
        format_string: 普通模式下的格式 / Format used when rich is off

    Returns:
        包的根 logger / The package root logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # 重复调用时先清理 handler / Drop handlers from a previous call
    if logger.handlers:
        logger.handlers.clear()

    if rich:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

    handler.setLevel(getattr(logging, level.upper()))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """获取模块 logger / Get a module logger under the package namespace"""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
