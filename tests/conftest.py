"""Root-level pytest fixtures for the Rivercast test suite.

Provides shared configuration fixtures following Pydantic-based architecture.
All tests must use these fixtures instead of creating raw dict configs.
"""

import logging
import pytest
from pathlib import Path
import tempfile
import shutil

from rivercast.schemas import ParamConfig, UserConfig, resolve_config
from rivercast.precip.tile_fetcher import TileFetcher
from rivercast.precip.sampler import PrecipitationSampler

from tests.helpers.fake_tiles import FakeSession, make_tile_png, HUE_214


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using user_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.

    Examples
    --------
    >>> def test_renderer_init(internal_config):
    ...     renderer = RiskZoneRenderer(internal_config)
    ...     assert renderer.ring_points == 32
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Use this when you need to override specific values for a test.
    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_velocity(make_config):
    ...     config = make_config(flow_velocity=5)
    ...     assert config.advection.flow_velocity_ms == 5.0
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Tile Fixtures
# =============================================================================

@pytest.fixture
def tile_png():
    """Factory for solid-color PNG tiles."""
    return make_tile_png


@pytest.fixture
def fake_session():
    """Factory for FakeSession objects routing URL substrings to bodies."""
    def _make(routes=None, default=None):
        return FakeSession(routes, default)
    return _make


@pytest.fixture
def make_sampler(internal_config):
    """Factory for a PrecipitationSampler backed by a FakeSession.

    Returns (sampler, session) so tests can inspect requested URLs.
    """
    def _make(routes=None, default=make_tile_png(HUE_214), config=None):
        config = config or internal_config
        session = FakeSession(routes, default)
        sampler = PrecipitationSampler(config, fetcher=TileFetcher(config, session=session))
        return sampler, session
    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def restore_root_logging():
    """Restore root logger handlers after tests that reconfigure logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def panama_path():
    """Two-point path whose points share one zoom-10 tile."""
    return [(-79.52, 9.00), (-79.50, 9.02)]


@pytest.fixture
def equator_path():
    """Three-point path along the equator, ~1112 m per segment."""
    return [(0.0, 0.0), (0.01, 0.0), (0.02, 0.0)]
