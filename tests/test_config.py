"""Tests for clustering configuration and settings loading."""

import json
import logging
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from keyword_clusters.clustering.config import (
    ClusteringConfig,
    DefaultParamsConfig,
    EmbeddingConfig,
    load_clustering_config,
)
from keyword_clusters.clustering.types import ClusteringParams, SemanticProviderKind
from keyword_clusters.config import settings as settings_module
from keyword_clusters.config.settings import Settings
from keyword_clusters.exceptions import ConfigError
from keyword_clusters.logging_config import configure_logging


class TestLoadFromYaml:
    """Test loading configuration from a YAML file."""

    def test_load_full_config(self, tmp_path: Path) -> None:
        config_path = tmp_path / "clustering.yaml"
        config_path.write_text(
            yaml.dump(
                {
                    "defaults": {
                        "overlap_threshold": 5,
                        "distance_threshold": 0.2,
                        "min_cluster_size": 3,
                        "semantic_provider": "external",
                    },
                    "embedding": {"model": "custom-model", "batch_size": 32},
                    "export": {"filename_prefix": "clusters"},
                }
            )
        )
        cfg = load_clustering_config(config_path)
        assert cfg.defaults.overlap_threshold == 5
        assert cfg.defaults.semantic_provider is SemanticProviderKind.EXTERNAL
        assert cfg.embedding.model == "custom-model"
        assert cfg.embedding.batch_size == 32
        assert cfg.export.filename_prefix == "clusters"

    def test_partial_override(self, tmp_path: Path) -> None:
        config_path = tmp_path / "clustering.yaml"
        config_path.write_text(yaml.dump({"defaults": {"overlap_threshold": 7}}))

        cfg = load_clustering_config(config_path)
        assert cfg.defaults.overlap_threshold == 7
        assert cfg.defaults.min_cluster_size == 2
        assert cfg.embedding == EmbeddingConfig()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_path = tmp_path / "clustering.yaml"
        config_path.write_text("")
        assert load_clustering_config(config_path) == ClusteringConfig()

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        assert load_clustering_config(tmp_path / "nope.yaml") == ClusteringConfig()

    def test_load_packaged_config(self) -> None:
        """The packaged clustering.yaml matches the built-in defaults."""
        path = Settings().clustering_config_path
        assert path.is_file()
        cfg = load_clustering_config(path)
        assert cfg.defaults.to_params() == ClusteringParams()
        assert cfg.export.filename_prefix == "keyword-clusters"


class TestValidation:
    def test_threshold_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            DefaultParamsConfig(overlap_threshold=12)

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValidationError):
            DefaultParamsConfig(semantic_provider="bert")

    def test_batch_size_bounds(self) -> None:
        with pytest.raises(ValidationError):
            EmbeddingConfig(batch_size=0)

    def test_defaults_convert_to_params(self) -> None:
        params = DefaultParamsConfig(overlap_threshold=4, distance_threshold=0.5).to_params()
        assert params == ClusteringParams(overlap_threshold=4, distance_threshold=0.5)


class TestSettings:
    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("KEYWORD_CLUSTERS_EMBEDDING_API_KEY", "sk-test")
        monkeypatch.setenv("KEYWORD_CLUSTERS_LOG_JSON", "false")
        settings = Settings()
        assert settings.embedding_api_key == "sk-test"
        assert settings.log_json is False

    def test_default_config_path(self, monkeypatch) -> None:
        monkeypatch.delenv("KEYWORD_CLUSTERS_CLUSTERING_CONFIG_PATH", raising=False)
        settings = Settings()
        assert settings.clustering_config_path.name == "clustering.yaml"
        assert settings.clustering_config_path.parent.name == "config"
        assert settings.clustering_config_path.parent == Path(settings_module.__file__).parent


class TestLogging:
    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ConfigError):
            configure_logging(json_output=True, log_level="CHATTY")

    def test_json_lines_carry_app_name(self, capsys) -> None:
        configure_logging(json_output=True, log_level="INFO")
        logging.getLogger("keyword_clusters.test").info("hello")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "hello"
        assert record["app"] == "keyword-clusters"
        assert record["level"] == "info"
