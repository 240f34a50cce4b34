import pytest

from checkout_sim.sampling import Sampler


def test_same_seed_same_stream():
    a, b = Sampler(123), Sampler(123)
    assert [a.exponential(2.0) for _ in range(5)] == [b.exponential(2.0) for _ in range(5)]
    assert a.uniform_int(1, 25) == b.uniform_int(1, 25)


def test_exponential_requires_positive_mean():
    with pytest.raises(ValueError):
        Sampler(0).exponential(0)


def test_uniform_int_is_inclusive():
    s = Sampler(5)
    draws = {s.uniform_int(0, 2) for _ in range(200)}
    assert draws == {0, 1, 2}


def test_uniform_real_stays_in_range_and_collapses_to_a_point():
    s = Sampler(9)
    assert all(0.5 <= s.uniform_real(0.5, 2.0) <= 2.0 for _ in range(100))
    assert s.uniform_real(1.0, 1.0) == 1.0
