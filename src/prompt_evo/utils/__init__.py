"""工具模块 / Utility modules"""

from prompt_evo.utils.i18n import t, set_language, get_language
from prompt_evo.utils.logging import setup_logging, get_logger

__all__ = ["t", "set_language", "get_language", "setup_logging", "get_logger"]
