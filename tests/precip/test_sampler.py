"""Tests for path sampling against a fake tile server."""

import pytest

from rivercast.contracts import ContractViolation
from rivercast.core.types import TileAddress

from tests.helpers.fake_tiles import HUE_193, MAGENTA, make_tile_png

pytestmark = pytest.mark.unit


def test_short_path_is_not_sampled(make_sampler):
    sampler, session = make_sampler()

    assert sampler.sample([], 0) == []
    assert sampler.sample([(-79.52, 9.00)], 0) == []
    assert session.requested == []


def test_shared_tile_fetched_once(make_sampler, panama_path):
    sampler, session = make_sampler()

    samples = sampler.sample(panama_path, 0)

    assert len(samples) == 2
    assert len(session.requested) == 1
    assert session.requested[0].endswith("/0h/10/285/486.png")


def test_samples_follow_path_order(make_sampler, panama_path):
    sampler, _ = make_sampler()

    samples = sampler.sample(panama_path, 0)

    assert [s.path_index for s in samples] == [0, 1]
    assert samples[0].coordinates == panama_path[0]
    assert samples[1].coordinates == panama_path[1]
    assert all(s.intensity == 1.0 for s in samples)
    assert samples[0].tile == TileAddress(x=285, y=486, zoom=10)


def test_pixels_inside_tile(make_sampler, panama_path):
    sampler, _ = make_sampler()

    for sample in sampler.sample(panama_path, 0):
        px, py = sample.pixel
        assert 0 <= px < 256
        assert 0 <= py < 256


def test_offset_selects_tile_set(make_sampler, panama_path):
    sampler, session = make_sampler(routes={
        "/0h/": make_tile_png(HUE_193),
        "/12h/": make_tile_png(MAGENTA),
    })

    now = sampler.sample(panama_path, 0)
    later = sampler.sample(panama_path, 12)

    assert [s.intensity for s in now] == [0.4, 0.4]
    assert [s.intensity for s in later] == [pytest.approx(28.0)] * 2
    assert "/12h/" in session.requested[-1]


def test_zoom_override(make_sampler, panama_path):
    sampler, session = make_sampler()

    samples = sampler.sample(panama_path, 0, zoom=8)

    assert samples[0].tile.zoom == 8
    assert "/0h/8/71/121.png" in session.requested[0]


def test_distinct_tiles_fetched_separately(make_sampler):
    sampler, session = make_sampler()
    path = [(-79.52, 9.00), (-79.00, 9.00), (-79.51, 9.01)]

    samples = sampler.sample(path, 0)

    assert len(samples) == 3
    assert len(session.requested) == 2
    assert sorted(s.tile.x for s in samples) == [285, 285, 287]


def test_failed_tile_points_are_skipped(make_sampler):
    sampler, _ = make_sampler(routes={"/287/": 500})
    path = [(-79.52, 9.00), (-79.00, 9.00), (-79.51, 9.01)]

    samples = sampler.sample(path, 0)

    assert [s.path_index for s in samples] == [0, 2]


def test_undecodable_tile_points_are_skipped(make_sampler, panama_path):
    sampler, _ = make_sampler(default=b"not an image")

    assert sampler.sample(panama_path, 0) == []


def test_missing_tile_logs_warning(make_sampler, panama_path, caplog):
    sampler, _ = make_sampler(default=None)

    with caplog.at_level("WARNING", logger="rivercast.precip.sampler"):
        assert sampler.sample(panama_path, 0) == []

    assert "unavailable" in caplog.text


def test_sampling_checks_output_order(make_sampler, panama_path, monkeypatch):
    sampler, _ = make_sampler()

    def broken(samples, n_points):
        raise ContractViolation("out of order")

    monkeypatch.setattr("rivercast.precip.sampler.assert_samples_ordered", broken)
    with pytest.raises(ContractViolation):
        sampler.sample(panama_path, 0)


def test_close_releases_http_session(make_sampler):
    sampler, session = make_sampler()

    sampler.close()

    assert session.closed
