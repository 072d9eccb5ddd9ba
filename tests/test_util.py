import pytest

from lensm.util import (
    ScrollAnimation,
    ease_in_out_cubic,
    in_range,
    sorting_name,
)


@pytest.mark.parametrize(
    "value,length,expected",
    [(0, 1, True), (-1, 5, False), (5, 5, False), (4, 5, True), (0, 0, False)],
)
def test_in_range(value, length, expected):
    assert in_range(value, length) is expected


def test_ease_endpoints():
    assert ease_in_out_cubic(0.0) == 0.0
    assert ease_in_out_cubic(1.0) == 1.0


@pytest.mark.parametrize("t", [0.0, 0.1, 0.25, 0.4, 0.5, 0.7, 0.9])
def test_ease_symmetric(t):
    assert ease_in_out_cubic(t) + ease_in_out_cubic(1 - t) == pytest.approx(1.0)


def test_ease_monotonic():
    values = [ease_in_out_cubic(i / 100) for i in range(101)]
    assert values == sorted(values)


def test_sorting_name_collapses_delimiters():
    assert sorting_name("main.(*File).Close") == "main file close"


def test_sorting_name_lowercases_and_is_idempotent():
    name = sorting_name("Runtime.MallocGC")
    assert name == name.lower()
    assert sorting_name(name) == name
    assert "." not in name


def test_sorting_name_orders_case_insensitively():
    assert sorting_name("A.bar") == "a bar"
    assert sorting_name("a.Baz") == "a baz"
    assert sorting_name("b.Foo") == "b foo"
    assert sorting_name("A.bar") < sorting_name("a.Baz") < sorting_name("b.Foo")


def test_inactive_animation_returns_target():
    anim = ScrollAnimation()
    anim.to = 7.0
    assert anim.update(100.0) == (7.0, False)


def test_animation_start_and_finish():
    anim = ScrollAnimation()
    anim.start(10.0, 0.0, 100.0, 2.0)
    pos, running = anim.update(10.0)
    assert running is True
    assert pos == pytest.approx(0.0)

    mid, running = anim.update(11.0)
    assert running is True
    assert mid == pytest.approx(50.0)

    end, running = anim.update(12.5)
    assert (end, running) == (100.0, True)
    assert anim.active is False
    assert anim.update(13.0) == (100.0, False)


def test_animation_progress_monotonic():
    anim = ScrollAnimation()
    anim.start(0.0, 20.0, -20.0, 1.0)
    positions = [anim.update(i / 10)[0] for i in range(11)]
    assert positions == sorted(positions, reverse=True)
    assert positions[-1] == pytest.approx(-20.0)


def test_animation_stop():
    anim = ScrollAnimation()
    anim.start(0.0, 1.0, 3.0, 5.0)
    anim.stop()
    assert anim.update(1.0) == (3.0, False)