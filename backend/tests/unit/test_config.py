"""
配置加载单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_config.py -v
"""

import logging
from pathlib import Path

import pytest

from mdcarousel.config import RuntimeConfig, reload_config, setup_logging


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = RuntimeConfig()
        assert config.canvas.width == 1080
        assert config.canvas.height == 1440
        assert config.canvas.device_scale_factor == 1
        assert config.pipeline.failure_policy == "fail_fast"
        assert config.upload_limits.max_size_mb == 5

    def test_from_yaml_missing_file(self, temp_dir: Path):
        """测试配置文件不存在时使用默认值"""
        config = RuntimeConfig.from_yaml(temp_dir / "nope.yaml")
        assert config.concurrency.max_workers == 4

    def test_from_yaml_default_values(self, temp_dir: Path):
        """测试 {default: x} 结构展平"""
        docs = temp_dir / "documents"
        docs.mkdir()
        yaml_path = docs / "runtime.yaml"
        yaml_path.write_text(
            "runtime_options:\n"
            "  concurrency:\n"
            "    max_workers:\n"
            "      default: 2\n"
            "      desc: 并发\n"
            "  pipeline:\n"
            "    failure_policy: partial\n"
            "  engine:\n"
            "    launch_args: [--no-sandbox]\n"
            "  storage:\n"
            "    public_dir: public\n",
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(yaml_path)
        assert config.concurrency.max_workers == 2
        assert config.pipeline.failure_policy == "partial"
        assert config.engine.launch_args == ["--no-sandbox"]
        # 相对路径按项目根解析
        assert config.storage.public_dir == (temp_dir / "public").resolve()

    def test_repo_yaml_loads(self):
        """测试仓库自带配置可加载"""
        path = Path(__file__).resolve().parents[3] / "documents" / "runtime.yaml"
        config = reload_config(path)
        assert config.canvas.width == 1080
        assert config.pagination.delimiter == "---"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        """测试环境变量覆盖"""
        monkeypatch.setenv("CAROUSEL_CONCURRENCY__MAX_WORKERS", "8")
        config = RuntimeConfig()
        assert config.concurrency.max_workers == 8

    def test_env_override_yaml(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """测试环境变量优先于 YAML，且只覆盖指定字段"""
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text(
            "runtime_options:\n"
            "  concurrency:\n"
            "    max_workers:\n"
            "      default: 4\n"
            "  timeouts:\n"
            "    render_job_sec: 12\n"
            "    engine_launch_sec: 90\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("CAROUSEL_CONCURRENCY__MAX_WORKERS", "8")
        monkeypatch.setenv("CAROUSEL_TIMEOUTS__RENDER_JOB_SEC", "20")

        config = RuntimeConfig.from_yaml(yaml_path)

        assert config.concurrency.max_workers == 8
        assert config.timeouts.render_job_sec == 20
        assert config.timeouts.engine_launch_sec == 90

    def test_repo_yaml_env_override(self, monkeypatch: pytest.MonkeyPatch):
        """测试仓库自带配置加载时环境变量仍生效"""
        monkeypatch.setenv("CAROUSEL_CONCURRENCY__MAX_WORKERS", "8")
        path = Path(__file__).resolve().parents[3] / "documents" / "runtime.yaml"
        assert RuntimeConfig.from_yaml(path).concurrency.max_workers == 8

    def test_yaml_outside_documents(self, temp_dir: Path):
        """测试配置文件不在 documents/ 下时相对路径以其所在目录为基准"""
        conf_dir = temp_dir / "elsewhere"
        conf_dir.mkdir()
        yaml_path = conf_dir / "x.yaml"
        yaml_path.write_text(
            "runtime_options:\n  storage:\n    public_dir: public\n",
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(yaml_path)
        assert config.storage.public_dir == (conf_dir / "public").resolve()
        assert config.logging.log_dir == (conf_dir / "storage" / "logs").resolve()

    def test_uploads_dir(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试上传目录"""
        assert runtime_config.storage.uploads_dir == temp_dir / "public" / "uploads"
        runtime_config.ensure_dirs()
        assert runtime_config.storage.uploads_dir.is_dir()


class TestLogging:
    """日志配置测试"""

    def test_setup_logging_level(self, runtime_config: RuntimeConfig):
        runtime_config.logging.log_level = "debug"
        logger = setup_logging(runtime_config)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_setup_logging_idempotent(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试重复调用不叠加 handler，可写文件"""
        runtime_config.logging.log_to_file = True
        runtime_config.logging.log_dir = temp_dir / "logs"
        setup_logging(runtime_config)
        logger = setup_logging(runtime_config)
        assert len(logger.handlers) == 2
        logger.info("hello")
        assert (temp_dir / "logs" / "carousel.log").exists()
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
