"""Tests for ImportConfig."""

import pytest

from custimport import ConfigError, ImportConfig


class TestImportConfig:
    def test_defaults(self):
        config = ImportConfig()
        assert config.batch_size == 5000
        assert config.strict is False
        assert config.table == "customers"
        assert config.upsert is False
        assert config.queue_size == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"batch_size": 0},
            {"queue_size": -1},
            {"table": "customers; DROP TABLE x"},
            {"table": "1customers"},
            {"delimiter": ";;"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            ImportConfig(**kwargs)


class TestFromEnv:
    def test_empty_env_gives_defaults(self):
        assert ImportConfig.from_env({}) == ImportConfig()

    def test_reads_prefixed_variables(self):
        config = ImportConfig.from_env(
            {
                "CUSTOMER_IMPORT_BATCH_SIZE": "250",
                "CUSTOMER_IMPORT_STRICT": "true",
                "CUSTOMER_IMPORT_UPSERT": "0",
                "CUSTOMER_IMPORT_QUEUE_SIZE": "16",
                "CUSTOMER_IMPORT_TABLE": "crm_customers",
                "UNRELATED": "x",
            }
        )
        assert config == ImportConfig(
            batch_size=250, strict=True, upsert=False, queue_size=16, table="crm_customers"
        )

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("CUSTOMER_IMPORT_BATCH_SIZE", "42")
        assert ImportConfig.from_env().batch_size == 42

    def test_bad_integer(self):
        with pytest.raises(ConfigError, match="CUSTOMER_IMPORT_BATCH_SIZE"):
            ImportConfig.from_env({"CUSTOMER_IMPORT_BATCH_SIZE": "lots"})

    def test_bad_boolean(self):
        with pytest.raises(ConfigError, match="CUSTOMER_IMPORT_STRICT"):
            ImportConfig.from_env({"CUSTOMER_IMPORT_STRICT": "maybe"})

    def test_out_of_range_value(self):
        with pytest.raises(ConfigError, match="batch_size"):
            ImportConfig.from_env({"CUSTOMER_IMPORT_BATCH_SIZE": "-5"})
