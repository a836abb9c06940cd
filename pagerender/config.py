"""
描述: PageRender 全局配置加载器
主要功能:
    - 统一管理渲染层配置 (Settings)
    - 支持 YAML 文件加载与环境变量覆盖 (Env Override)
    - 提供 Pydantic 类型校验
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


# region 配置模型定义
class ServerSettings(BaseModel):
    """服务器配置"""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False


class TemplateSettings(BaseModel):
    """模板目录与分隔符配置"""
    template_dir: str = "templates"
    error_template_dir: str = ""
    left_delimiter: str = ""
    right_delimiter: str = ""
    error_templates: dict[int, str] = Field(default_factory=dict)


class AssetSettings(BaseModel):
    """资源来源配置 (按顺序查找, 为空时使用 template_dir)"""
    sources: list[str] = Field(default_factory=list)


class ErrorSettings(BaseModel):
    fatal_status_codes: list[int] = Field(default_factory=list)


class MonitoringSettings(BaseModel):
    """Sentry 监控上报配置"""
    enabled: bool = False
    dsn: str = ""
    environment: str = "production"
    suppressed_status_codes: list[int] = Field(default_factory=lambda: [401, 403, 404])
    traces_sample_rate: float = 0.0


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """全局配置聚合根"""
    server: ServerSettings = Field(default_factory=ServerSettings)
    templates: TemplateSettings = Field(default_factory=TemplateSettings)
    assets: AssetSettings = Field(default_factory=AssetSettings)
    errors: ErrorSettings = Field(default_factory=ErrorSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def asset_roots(self) -> list[str]:
        """文件系统资源根目录 (查找顺序)"""
        return list(self.assets.sources) or [self.templates.template_dir]
# endregion


# region 配置加载逻辑
def _expand_env(value: Any) -> Any:
    """递归展开配置中的环境变量占位符 (${VAR} 或 ${VAR:-default})"""
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            expr = match.group(1)
            if ":-" in expr:
                key, default = expr.split(":-", 1)
                return os.getenv(key, default)
            return os.getenv(expr, "")

        return _ENV_PATTERN.sub(replace, value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _load_yaml(path: Path) -> dict[str, Any]:
    """读取 YAML 配置文件"""
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return _expand_env(data)


def _set_nested(data: dict[str, Any], keys: list[str], value: Any) -> None:
    current = data
    for key in keys[:-1]:
        current = current.setdefault(key, {})
    current[keys[-1]] = value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """
    应用环境变量覆盖

    优先级: 显式环境变量 > config.yaml > 默认值
    """
    mapping = {
        "PAGERENDER_TEMPLATE_DIR": ["templates", "template_dir"],
        "PAGERENDER_ERROR_TEMPLATE_DIR": ["templates", "error_template_dir"],
        "SENTRY_DSN": ["monitoring", "dsn"],
        "SENTRY_ENVIRONMENT": ["monitoring", "environment"],
        "LOG_LEVEL": ["logging", "level"],
        "LOG_FORMAT": ["logging", "format"],
        "SERVER_HOST": ["server", "host"],
        "SERVER_PORT": ["server", "port"],
    }
    for env_key, path in mapping.items():
        env_value = os.getenv(env_key)
        if env_value is not None and env_value != "":
            _set_nested(data, path, env_value)
    return data


def load_settings(config_path: str | None = None) -> Settings:
    """加载并验证完整配置"""
    path = Path(config_path or os.getenv("CONFIG_PATH", "config.yaml"))
    data = _load_yaml(path)
    data = _apply_env_overrides(data)
    return Settings.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """获取单例配置对象 (LRU Cache)"""
    return load_settings()
# endregion
