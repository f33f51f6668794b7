import logging

import pytest

from quiver.config import AppSettings, ConfigError, LoggingSettings, get_settings
from quiver.ids import IdAllocator, IdExhaustedError
from quiver.log import ROOT_LOGGER_NAME, configure_logging, getLogger


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = AppSettings()

    assert settings.allocator.max_id == 2**32 - 1
    assert settings.algebra.complement_edge_label == "complemented_edge"
    assert settings.algebra.series_edge_label == "series_composition_edge"
    assert settings.algebra.product_edge_label == "cartesian_product_edge"
    assert settings.algebra.copied_edge_label == "copied_edge"
    assert settings.text.separator == "->"


def test_env_overrides_nested_sections(monkeypatch) -> None:
    monkeypatch.setenv("QUIVER_ALLOCATOR__MAX_ID", "3")
    monkeypatch.setenv("QUIVER_ALGEBRA__SERIES_EDGE_LABEL", "bridge")
    monkeypatch.setenv("QUIVER_LOGGING__LEVEL", "DEBUG")

    settings = get_settings()

    assert settings.allocator.max_id == 3
    assert settings.algebra.series_edge_label == "bridge"
    assert settings.logging.level == "DEBUG"


def test_allocator_picks_up_configured_ceiling(monkeypatch) -> None:
    monkeypatch.setenv("QUIVER_ALLOCATOR__MAX_ID", "1")

    alloc = IdAllocator()
    assert alloc.allocate_node_id() == 1
    with pytest.raises(IdExhaustedError):
        alloc.allocate_node_id()


def test_invalid_max_id_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("QUIVER_ALLOCATOR__MAX_ID", "0")
    with pytest.raises(ConfigError):
        get_settings()


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_logger_names_live_under_root() -> None:
    assert getLogger("graph.algebra").name == "quiver.graph.algebra"
    assert getLogger("quiver.ids").name == "quiver.ids"
    assert getLogger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME


def test_configure_logging_replaces_its_handler() -> None:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    before = list(root.handlers)
    try:
        configure_logging(LoggingSettings(level="WARNING"))
        logger = configure_logging(LoggingSettings(level="DEBUG"))

        ours = [h for h in logger.handlers if getattr(h, "_quiver_configured", False)]
        assert len(ours) == 1
        assert logger.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(logging.NOTSET)
