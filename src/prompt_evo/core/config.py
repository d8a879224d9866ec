"""配置加载 / Configuration loader"""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from prompt_evo.models.config import Config
from prompt_evo.utils.i18n import set_language
from prompt_evo.utils.logging import setup_logging

DEFAULT_CONFIG_FILES = ["prompt-evo.yaml", "prompt-evo.yml", ".prompt-evo.yaml"]

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _resolve_env_vars(value: str) -> str:
    """解析环境变量 ${VAR} 格式，未定义的保持原样 / Resolve ${VAR}, unknown ones are kept"""
    return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)


def _resolve_config_env_vars(value: Any) -> Any:
    """递归解析配置中的环境变量 / Recursively resolve env vars in config"""
    if isinstance(value, str):
        return _resolve_env_vars(value)
    if isinstance(value, dict):
        return {k: _resolve_config_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_config_env_vars(item) for item in value]
    return value


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件 / Load configuration file

    Args:
        config_path: 配置文件路径，默认依次查找 prompt-evo.yaml / prompt-evo.yml / .prompt-evo.yaml

    Returns:
        Config 对象 / Config object
    """
    if config_path is None:
        for name in DEFAULT_CONFIG_FILES:
            if Path(name).exists():
                config_path = name
                break
        else:
            raise FileNotFoundError(
                f"No config file found (looked for {', '.join(DEFAULT_CONFIG_FILES)})"
            )

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    config = Config(**_resolve_config_env_vars(config_dict))

    # 设置全局语言与日志 / Apply language and logging from config
    set_language(config.language)
    setup_logging(config.logging.level, config.logging.rich)

    return config
