"""
运行期配置 - 读取 documents/runtime.yaml

职责：
- 加载画布/并发/超时/引擎/分页/上传等运行参数
- 提供环境变量覆盖机制（CAROUSEL_ 前缀，嵌套用 __ 分隔）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


class CanvasConfig(BaseModel):
    """画布配置（输出尺寸固定）"""

    width: int = 1080
    height: int = 1440
    device_scale_factor: float = 1


class ConcurrencyConfig(BaseModel):
    """并发配置"""

    max_workers: int = 4


class TimeoutConfig(BaseModel):
    """超时配置"""

    render_job_sec: float = 30
    engine_launch_sec: float = 60


class EngineConfig(BaseModel):
    """渲染引擎配置"""

    browser: str = "chromium"
    headless: bool = True
    launch_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )
    # 累计会话数达到该值且空闲时重启浏览器，0 表示不回收
    recycle_after: int = 200
    asset_base_url: str = "http://assets.carousel.local/"


class PaginationConfig(BaseModel):
    """分页配置"""

    delimiter: str = "---"
    page_break_marker: str = "<!-- pagebreak -->"
    strict_marker: bool = False


class PipelineConfig(BaseModel):
    """批量渲染策略"""

    failure_policy: Literal["fail_fast", "partial"] = "fail_fast"
    max_pages: int = 50


class UploadLimitsConfig(BaseModel):
    """上传限制"""

    max_size_mb: float = 5
    allowed_mime_prefix: str = "image/"


class StorageConfig(BaseModel):
    """本地存储配置"""

    public_dir: Path = Path("public")
    uploads_prefix: str = "/uploads/"

    @property
    def uploads_dir(self) -> Path:
        return self.public_dir / self.uploads_prefix.strip("/")


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: Path = Path("storage/logs")


_SECTIONS = (
    "canvas",
    "concurrency",
    "timeouts",
    "engine",
    "pagination",
    "pipeline",
    "upload_limits",
    "storage",
    "logging",
)


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    upload_limits: UploadLimitsConfig = Field(default_factory=UploadLimitsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "CAROUSEL_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """优先级：环境变量 > YAML（构造参数） > 默认值"""
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        # 以普通字典传入，环境变量可逐项覆盖（见 settings_customise_sources）
        config = cls(**{key: cls._extract(runtime_opts, key) for key in _SECTIONS})

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """
        解析相对路径配置为绝对路径

        配置文件位于 documents/ 时以其上一级（项目根）为基准，否则以配置文件所在目录为基准
        """
        root = base_dir.parent if base_dir.name == "documents" else base_dir
        if not self.storage.public_dir.is_absolute():
            self.storage.public_dir = (root / self.storage.public_dir).resolve()
        if not self.logging.log_dir.is_absolute():
            self.logging.log_dir = (root / self.logging.log_dir).resolve()

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.storage.uploads_dir.mkdir(parents=True, exist_ok=True)
        if self.logging.log_to_file:
            self.logging.log_dir.mkdir(parents=True, exist_ok=True)


# 全局配置实例
_config: RuntimeConfig | None = None

DEFAULT_CONFIG_PATH = Path("documents/runtime.yaml")


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
