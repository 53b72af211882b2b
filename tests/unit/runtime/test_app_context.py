"""Unit tests for the application context and configuration overrides."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.shop.runtime.config.config_data import ConfigData
from src.shop.runtime.context import (
    AppContext,
    _app_context,
    get_config,
    get_context,
    set_config,
    set_context,
    with_context,
)


class TestWithContext:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        context = get_context()

        assert isinstance(context, AppContext)
        assert isinstance(get_config(), ConfigData)
        assert context.config is get_config()

    def test_override_reverts_after_block(self):
        original = get_config()
        override = ConfigData()
        override.assets.root = "/tmp/override-assets"

        with with_context(override):
            assert get_config().assets.root == "/tmp/override-assets"
            assert get_config() is not original

        assert get_config() is original

    def test_partial_override_inherits_other_values(self):
        original = get_config()
        override = ConfigData()
        override.assets.chunk_size = 8

        with with_context(override):
            config = get_config()
            assert config.assets.chunk_size == 8
            assert config.assets.root == original.assets.root
            assert config.database.url == original.database.url

    def test_nested_overrides(self):
        outer = ConfigData()
        outer.assets.root = "/outer"
        inner = ConfigData()
        inner.assets.upload_field = "file"

        with with_context(outer):
            with with_context(inner):
                assert get_config().assets.root == "/outer"
                assert get_config().assets.upload_field == "file"
            assert get_config().assets.upload_field == "image"

    def test_none_override_is_a_no_op(self):
        original = get_config()

        with with_context(None):
            assert get_config() is original

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"assets": {}}):
                pass

    def test_override_restored_after_exception(self):
        original = get_config()
        override = ConfigData()
        override.assets.root = "/boom"

        with pytest.raises(RuntimeError):
            with with_context(override):
                raise RuntimeError("boom")

        assert get_config() is original

    def test_threads_start_from_default(self):
        override = ConfigData()
        override.assets.root = "/thread-local"

        with with_context(override):
            with ThreadPoolExecutor(max_workers=1) as pool:
                root = pool.submit(lambda: get_config().assets.root).result()

        assert root != "/thread-local"

    def test_set_context_token_resets(self):
        original = get_context()
        token = set_context(AppContext(config=ConfigData()))
        try:
            assert get_context() is not original
        finally:
            _app_context.reset(token)

        assert get_context() is original


class TestSetConfig:
    def test_replaces_whole_config(self):
        original = get_context()
        replacement = ConfigData()
        replacement.assets.root = "/replaced"
        token = set_context(original)
        try:
            set_config(replacement)
            assert get_config() is replacement
        finally:
            _app_context.reset(token)

        assert get_context() is original
