import itertools
import random

import pytest

from framesim.alignment.max_matching import MaxWeightMatching
from framesim.alignment.max_matching import max_weight_matching


def best_total(weights, rows, cols):
    best = 0.0
    if rows <= cols:
        for perm in itertools.permutations(range(cols), rows):
            best = max(best, sum(weights.get((i, perm[i]), 0.0) for i in range(rows)))
    else:
        for perm in itertools.permutations(range(rows), cols):
            best = max(best, sum(weights.get((perm[j], j), 0.0) for j in range(cols)))
    return best


def test_identity_matrix():
    triples = []
    for i in range(3):
        for j in range(3):
            triples.append((i, j + 3, 1.0 if i == j else 0.0))
    result = max_weight_matching(triples)
    assert sorted(result) == [(0, 3, 1.0), (1, 4, 1.0), (2, 5, 1.0)]


def test_sparse_identity_matrix():
    result = max_weight_matching([(0, 0, 1.0), (1, 1, 1.0), (2, 2, 1.0)])
    assert sorted(result) == [(0, 0, 1.0), (1, 1, 1.0), (2, 2, 1.0)]


def test_rectangular_matrix():
    rows = [(0.9, 0.9), (0.9, 0.8), (0.8, 0.1), (1.0, 0.1)]
    matching = MaxWeightMatching()
    for i, row in enumerate(rows):
        for j, w in enumerate(row):
            matching.add_weight(i, 'ab'[j], w)
    result = matching.run()
    assert len(result) == 2
    assert len(set(r[0] for r in result)) == 2
    assert len(set(r[1] for r in result)) == 2
    # row 3 takes column a, row 0 takes column b
    assert sum(w for _, _, w in result) == pytest.approx(1.9)
    assert sorted(result) == [(0, 'b', 0.9), (3, 'a', 1.0)]


def test_wide_matrix():
    result = max_weight_matching([(0, 0, 0.2), (0, 1, 0.9), (0, 2, 0.5)])
    assert result == [(0, 1, 0.9)]


def test_square_matrix_with_conflicts():
    weights = [[1.0, 1.0, 0.8], [0.9, 0.8, 0.1], [0.9, 0.7, 0.4]]
    triples = [(i, j, weights[i][j]) for i in range(3) for j in range(3)]
    result = max_weight_matching(triples)
    assert sum(w for _, _, w in result) == pytest.approx(2.5)
    assert sorted((i, j) for i, j, _ in result) == [(0, 2), (1, 1), (2, 0)]


def test_empty_input():
    assert max_weight_matching([]) == []
    assert MaxWeightMatching().run() == []


def test_unlisted_pairs_count_as_zero():
    result = max_weight_matching([(0, 0, 0.5), (1, 1, 0.5), (0, 1, 0.0), (1, 0, 0.0)])
    assert sorted(result) == [(0, 0, 0.5), (1, 1, 0.5)]
    result = max_weight_matching([(0, 'x', 0.3), (1, 'y', 0.4)])
    assert sorted(result) == [(0, 'x', 0.3), (1, 'y', 0.4)]


def test_weight_matrix_follows_first_seen_order():
    matching = MaxWeightMatching()
    matching.add_weight('p', 'y', 0.5)
    matching.add_weight('q', 'x', 0.3)
    matching.add_weight('p', 'x', 0.75)
    assert matching.left_ids == ['p', 'q']
    assert matching.right_ids == ['y', 'x']
    assert matching.weight_matrix() == [[0.5, 0.75], [0.0, 0.3]]
    assert sorted(matching.run()) == [('p', 'y', 0.5), ('q', 'x', 0.3)]


@pytest.mark.parametrize('seed', range(40))
def test_optimal_against_exhaustive_search(seed):
    rng = random.Random(seed)
    rows = rng.randint(1, 6)
    cols = rng.randint(1, 6)
    weights = dict()
    matching = MaxWeightMatching()
    for i in range(rows):
        for j in range(cols):
            if rng.random() < 0.8:
                w = round(rng.random(), 2)
                weights[(i, j)] = w
                matching.add_weight(i, j, w)
    if len(weights) == 0:
        return
    used_rows = sorted(set(i for i, _ in weights))
    used_cols = sorted(set(j for _, j in weights))
    result = matching.run()

    assert len(result) == min(len(used_rows), len(used_cols))
    assert len(set(i for i, _, _ in result)) == len(result)
    assert len(set(j for _, j, _ in result)) == len(result)
    for i, j, w in result:
        assert w == weights.get((i, j), 0.0)

    compact = dict(((used_rows.index(i), used_cols.index(j)), w) for (i, j), w in weights.items())
    expected = best_total(compact, len(used_rows), len(used_cols))
    assert sum(w for _, _, w in result) == pytest.approx(expected)


def test_distinct_positive_weights_give_full_assignment():
    rng = random.Random(7)
    n = 5
    values = rng.sample(range(1, 100), n * n)
    triples = [(i, j, values[i * n + j] / 100.0) for i in range(n) for j in range(n)]
    result = max_weight_matching(triples)
    assert len(result) == n
