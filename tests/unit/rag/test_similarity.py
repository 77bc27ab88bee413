"""Tests for cosine similarity."""

from __future__ import annotations

import math

import pytest

from docqa.rag.similarity import cosine_similarity


def test_identical_vectors_score_one():
    assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)


def test_orthogonal_vectors_score_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 2.0]) == pytest.approx(0.0)


def test_opposite_vectors_score_minus_one():
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_magnitude_does_not_matter():
    assert cosine_similarity([1.0, 1.0], [10.0, 10.0]) == pytest.approx(1.0)


def test_known_angle():
    assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(1 / math.sqrt(2))


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0


def test_empty_vectors_score_zero():
    assert cosine_similarity([], []) == 0.0


def test_dimension_mismatch_raises():
    with pytest.raises(ValueError, match="dimensions differ"):
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


def test_symmetric():
    a, b = [0.1, -0.7, 2.0], [1.5, 0.2, -0.3]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
