"""
配置管理
- 数据目录与文件路径
- data/config.json 的加载、补全与类型校验
"""

import os
import pathlib
import json
import logging

logger = logging.getLogger(__name__)

# 注册路径
DATA_BASE_PATH = pathlib.Path(os.environ.get("DATA_BASE_PATH", "./data"))
DATA_BASE_PATH.mkdir(parents=True, exist_ok=True)

CONFIG_FILE = DATA_BASE_PATH / "config.json"

# 学习数据文件 (用户、课程、成就)，可通过 TUTOR_DB_PATH 覆盖
TUTOR_DB_PATH = os.environ.get("TUTOR_DB_PATH")
TUTOR_DB_FILE = pathlib.Path(TUTOR_DB_PATH) if TUTOR_DB_PATH and str(TUTOR_DB_PATH).strip() else DATA_BASE_PATH / "tutor_db.json"


def check_config(example, current):
    for key, value in example.items():
        if key not in current:
            current[key] = value
        elif isinstance(value, dict):
            if not isinstance(current[key], dict):
                current[key] = value
            else:
                check_config(value, current[key])


def check_config_type(example, current) -> bool:
    for key, value in example.items():
        if key not in current:
            return False
        elif isinstance(value, dict):
            if not isinstance(current[key], dict):
                return False
            else:
                if not check_config_type(value, current[key]):
                    return False
        else:
            if not isinstance(current[key], type(value)):
                return False
    return True


def reset_mismatched_types(example, current) -> list:
    """将类型不匹配的项重置为示例值，返回被重置的键路径"""
    reset = []
    for key, value in example.items():
        if isinstance(value, dict):
            if not isinstance(current.get(key), dict):
                current[key] = value
                reset.append(key)
            else:
                reset.extend(f"{key}.{k}" for k in reset_mismatched_types(value, current[key]))
        elif not isinstance(current.get(key), type(value)):
            current[key] = value
            reset.append(key)
    return reset


class ConfigManager:
    """配置管理器"""

    # token_secret 为空字符串表示未配置，由 auth.config 决定回退策略
    config_example = {
        "token_secret": "",
        "token_expires_seconds": 604800,
        "cors": ["*"],
    }

    def __init__(self, config_path: pathlib.Path = CONFIG_FILE):
        self.config_path = config_path
        self.config = {}
        self.load_config()

    def load_config(self):
        """加载配置"""
        if self.config_path.exists():
            with open(self.config_path, "r", encoding="utf-8") as f:
                self.config = json.load(f)
            # 检查配置项是否完整
            check_config(self.config_example, self.config)
            self.save_config()
            # 检查配置项类型是否正确，只重置类型不匹配的项，保留其余配置 (如 token_secret)
            if not check_config_type(self.config_example, self.config):
                reset = reset_mismatched_types(self.config_example, self.config)
                logger.warning("配置项类型不匹配，已重置为默认值: %s (%s)", ", ".join(reset), self.config_path)
                self.save_config()
        else:
            # 初始化配置文件
            self.config = dict(self.config_example)
            self.save_config()

    def save_config(self):
        """保存配置"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.config, f, indent=4)

    def get(self, key: str, default=None):
        """获取配置项"""
        return self.config.get(key, default)


config_manager = ConfigManager()
