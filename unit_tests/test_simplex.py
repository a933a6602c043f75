"""
Unit tests for Simplex geometry, scoring and splitting.

Test strategy:
1. The centroid is the mean of the corners
2. A split yields d+1 children of equal volume tiling the parent
3. Random points of the parent fall in exactly one child
4. Scores are monotone in depth and corner values, and clamped to [min, best]
"""

import math

import numpy as np
import pytest

from simplex_optimizer import DepthDiscountScore, PointArena, SearchSpace, Simplex


def make_initial(d, values=None):
    arena = PointArena()
    corners = SearchSpace([(0.0, 1.0)] * d).initial_corners()
    if values is None:
        values = np.arange(d + 1, dtype=float)
    handles = tuple(arena.add(c, v) for c, v in zip(corners, values))
    return arena, Simplex(corners=handles, arena=arena)


def split_at_center(simplex, value=0.0, current_range=0.0):
    handle = simplex.arena.add(simplex.center, value)
    return handle, simplex.split(handle, current_range)


class TestGeometry:
    @pytest.mark.parametrize("d", [1, 2, 3, 6])
    def test_center_is_mean_of_corners(self, d):
        _, simplex = make_initial(d)
        np.testing.assert_allclose(simplex.center, np.full(d, 1.0 / (d + 1)))
        assert simplex.dim == d

    def test_wrong_number_of_corners(self):
        arena = PointArena()
        handles = tuple(arena.add(np.zeros(2), 0.0) for _ in range(2))
        with pytest.raises(ValueError):
            Simplex(corners=handles, arena=arena)

    @pytest.mark.parametrize("d", [1, 2, 3, 5])
    def test_initial_volume(self, d):
        _, simplex = make_initial(d)
        assert simplex.volume() == pytest.approx(1.0 / math.factorial(d))
        assert simplex.volume_ratio == 1.0

    def test_contains(self):
        _, simplex = make_initial(2)
        assert simplex.contains(np.array([0.2, 0.2]))
        assert simplex.contains(np.array([0.0, 1.0]))
        assert not simplex.contains(np.array([0.7, 0.7]))


class TestSplit:
    @pytest.mark.parametrize("d", [1, 2, 3, 5])
    def test_children_structure(self, d):
        _, parent = make_initial(d)
        handle, children = split_at_center(parent, current_range=4.5)

        assert len(children) == d + 1
        for i, child in enumerate(children):
            expected = list(parent.corners)
            expected[i] = handle
            assert child.corners == tuple(expected)
            assert child.depth == parent.depth + 1
            assert child.cached_range == 4.5
            assert child.arena is parent.arena

        # every original corner is kept by the d children that do not replace it
        for h in parent.corners:
            assert sum(h in c.corners for c in children) == d

    @pytest.mark.parametrize("d", [1, 2, 3, 5])
    def test_children_volumes_tile_parent(self, d):
        _, parent = make_initial(d)
        _, children = split_at_center(parent)
        volumes = [c.volume() for c in children]
        assert sum(volumes) == pytest.approx(parent.volume(), rel=1e-9)
        for child in children:
            assert child.volume() == pytest.approx(parent.volume() / (d + 1), rel=1e-9)
            assert child.volume_ratio == pytest.approx(1.0 / (d + 1))

    @pytest.mark.parametrize("d", [2, 3, 4])
    def test_random_points_fall_in_exactly_one_child(self, d):
        _, parent = make_initial(d)
        _, children = split_at_center(parent)
        # second level to exercise non-initial simplices
        _, grandchildren = split_at_center(children[0])
        leaves = children[1:] + grandchildren

        rng = np.random.default_rng(42)
        for _ in range(300):
            w = rng.dirichlet(np.ones(d + 1))
            x = w @ parent.corner_coordinates()
            inside = [leaf for leaf in leaves if np.all(leaf.barycentric(x) > 0.0)]
            assert len(inside) == 1

    def test_repeated_splits_keep_volume(self):
        _, parent = make_initial(3)
        leaves = [parent]
        for _ in range(6):
            target = leaves.pop(0)
            _, children = split_at_center(target)
            leaves.extend(children)
        assert sum(leaf.volume() for leaf in leaves) == pytest.approx(parent.volume(), rel=1e-9)
        for leaf in leaves:
            assert leaf.volume() == pytest.approx(leaf.volume_ratio * parent.volume(), rel=1e-6)

    def test_degenerate_split_raises(self):
        arena, parent = make_initial(2)
        with pytest.raises(RuntimeError):
            parent.split(parent.corners[1], 0.0)
        duplicate = arena.add(arena[parent.corners[2]].coordinates, 7.0)
        with pytest.raises(RuntimeError):
            parent.split(duplicate, 0.0)


class TestScore:
    def test_score_formula(self):
        arena, simplex = make_initial(2, values=[1.0, 2.0, 3.0])
        simplex.cached_range = 2.0
        # mean 2 - range 2 * depth / 4
        assert simplex.score(4.0) == pytest.approx(2.0)
        deeper = Simplex(corners=simplex.corners, arena=arena, depth=2, cached_range=2.0)
        assert deeper.score(4.0) == pytest.approx(1.0)

    def test_score_decreases_with_depth(self):
        arena, simplex = make_initial(2, values=[0.0, 1.0, 2.0])
        scores = [
            Simplex(corners=simplex.corners, arena=arena, depth=k, cached_range=3.0).score(6.0)
            for k in range(10)
        ]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_score_increases_with_values(self):
        _, low = make_initial(2, values=[0.0, 0.0, 1.0])
        _, high = make_initial(2, values=[0.0, 0.0, 2.0])
        low.cached_range = high.cached_range = 1.0
        assert high.score(6.0) > low.score(6.0)

    def test_score_clamped_to_best(self):
        _, simplex = make_initial(2, values=[1.0, 2.0, 3.0])
        rule = DepthDiscountScore(statistic="max")
        assert simplex.score(4.0, best_value=2.5, min_value=1.0, rule=rule) == 2.5
        assert simplex.score(4.0, best_value=2.5, min_value=1.0) == pytest.approx(2.0)

    def test_score_floored_to_min(self):
        arena, simplex = make_initial(2, values=[0.0, 0.0, 0.0])
        deep = Simplex(corners=simplex.corners, arena=arena, depth=12, cached_range=10.0)
        assert deep.score(6.0) == pytest.approx(-20.0)
        assert deep.score(6.0, best_value=10.0, min_value=0.0) == 0.0

    def test_max_statistic(self):
        _, simplex = make_initial(2, values=[1.0, 2.0, 6.0])
        rule = DepthDiscountScore(statistic="max")
        assert simplex.score(3.0, rule=rule) == pytest.approx(6.0)

    def test_invalid_rule_parameters(self):
        with pytest.raises(ValueError):
            DepthDiscountScore(statistic="median")
        _, simplex = make_initial(2)
        with pytest.raises(ValueError):
            simplex.score(0.0)

    def test_nan_score_is_floored(self):
        class NanRule:
            def raw_score(self, simplex, exploration_depth):
                return float("nan")

        _, simplex = make_initial(2)
        assert simplex.score(1.0, best_value=5.0, min_value=-5.0, rule=NanRule()) == -5.0
