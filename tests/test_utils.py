from __future__ import annotations

import pytest

from ericdress.core.utils import pick, random_id, safe_escape


def test_pick_single_element_never_consumes_entropy(scripted_random) -> None:
    rng = scripted_random()
    for _ in range(50):
        assert pick(["only"], rng) == "only"
    assert rng.calls == 0


def test_pick_uses_floor_of_scaled_random(scripted_random) -> None:
    pool = ["a", "b", "c", "d"]
    rng = scripted_random(0.0, 0.49, 0.5, 0.999)
    assert [pick(pool, rng) for _ in range(4)] == ["a", "b", "c", "d"]


def test_pick_rejects_empty_pool(scripted_random) -> None:
    with pytest.raises(ValueError):
        pick([], scripted_random())


def test_random_id_is_time_plus_offset_in_hex(scripted_random) -> None:
    assert random_id(scripted_random(0.5), clock=lambda: 1.0) == format(6000, "x")


def test_random_id_varies_with_offset(scripted_random) -> None:
    rng = scripted_random(0.0, 0.9)
    first = random_id(rng, clock=lambda: 1700000000.0)
    second = random_id(rng, clock=lambda: 1700000000.0)
    assert first != second
    assert int(second, 16) - int(first, 16) == 9000


def test_safe_escape_covers_html_specials() -> None:
    assert safe_escape("&<>\"'") == "&amp;&lt;&gt;&quot;&#x27;"
    assert safe_escape(42) == "42"
