"""Two-proportion z-test tests."""

import math

import pytest

from roro_engine.significance import compare, normal_cdf


class TestNormalCdf:
    def test_center(self):
        assert normal_cdf(0) == pytest.approx(0.5, abs=1e-6)

    @pytest.mark.parametrize("x,expected", [(1.0, 0.841345), (1.96, 0.975002), (2.576, 0.995002), (-1.0, 0.158655)])
    def test_known_values(self, x, expected):
        assert normal_cdf(x) == pytest.approx(expected, abs=1e-4)

    @pytest.mark.parametrize("x", [0.3, 1.5, 3.0, 5.5])
    def test_symmetric(self, x):
        assert normal_cdf(-x) == pytest.approx(1 - normal_cdf(x), abs=1e-9)

    def test_monotonic(self):
        xs = [i / 10 for i in range(-60, 61)]
        values = [normal_cdf(x) for x in xs]
        assert values == sorted(values)


class TestCompare:
    def test_clear_difference_is_significant(self):
        r = compare(1000, 100, 1000, 150)
        assert r.p1 == pytest.approx(0.10)
        assert r.p2 == pytest.approx(0.15)
        assert r.diff == pytest.approx(-0.05)
        # pooled p = 0.125, se = sqrt(0.125 * 0.875 * 2/1000)
        expected_z = -0.05 / math.sqrt(0.125 * 0.875 * 0.002)
        assert r.z == pytest.approx(expected_z)
        assert 3.2 < abs(r.z) < 3.5
        assert r.p_value < 0.01
        assert r.significant

    def test_small_difference_is_not_significant(self):
        r = compare(100, 10, 100, 11)
        assert r.p_value > 0.05
        assert r.p_value == pytest.approx(0.8175, abs=0.005)
        assert not r.significant

    def test_sign_follows_direction(self):
        assert compare(1000, 150, 1000, 100).z > 0
        assert compare(1000, 100, 1000, 150).z < 0

    @pytest.mark.parametrize("n1,c1,n2,c2", [(0, 0, 100, 10), (100, 10, 0, 0), (0, 0, 0, 0)])
    def test_zero_exposures(self, n1, c1, n2, c2):
        r = compare(n1, c1, n2, c2)
        assert r.z == 0.0
        assert r.p_value == 1.0
        assert not r.significant

    @pytest.mark.parametrize("c", [0, 100])
    def test_degenerate_pooled_rate(self, c):
        r = compare(100, c, 100, c)
        assert r.z == 0.0
        assert r.p_value == 1.0

    def test_equal_rates(self):
        r = compare(500, 50, 500, 50)
        assert r.z == pytest.approx(0.0)
        assert r.p_value == pytest.approx(1.0, abs=1e-4)

    def test_p_value_in_unit_interval(self):
        for n1, c1, n2, c2 in [(10, 9, 10, 1), (1000000, 1, 1000000, 900000), (3, 1, 7, 2)]:
            assert 0.0 <= compare(n1, c1, n2, c2).p_value <= 1.0

    def test_alpha_controls_significance(self):
        # p is about 0.077
        assert compare(1000, 100, 1000, 125, alpha=0.10).significant
        assert not compare(1000, 100, 1000, 125, alpha=0.05).significant

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            compare(-1, 0, 10, 1)
