import logging
import warnings

import dask.bag as db
import numpy as np
import pytest

from pdfclust.algorithms import ClusterAssigner, KMeansModel
from pdfclust.algorithms.clustering import nearest_centroid
from pdfclust.contracts import ClusteringNonconvergence, ContractViolation

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def two_groups():
    """Two well separated groups of histogram-like vectors."""
    low = [np.array([0.9, 0.1, 0.0]), np.array([0.8, 0.2, 0.0]), np.array([0.85, 0.15, 0.0])]
    high = [np.array([0.0, 0.1, 0.9]), np.array([0.0, 0.2, 0.8]), np.array([0.05, 0.1, 0.85])]
    return low, high


def histogram_bag(vectors, npartitions=2):
    pairs = [((float(i), 0.0), v) for i, v in enumerate(vectors)]
    return db.from_sequence(pairs, npartitions=npartitions)


@pytest.fixture
def assigner(make_config):
    return ClusterAssigner(make_config(NUM_CLUSTERS=2, NUM_ITERATIONS=20))


def test_nearest_centroid_prefers_lowest_index_on_ties():
    centroids = np.array([[0.0, 0.0], [2.0, 0.0]])
    assert nearest_centroid(np.array([[1.0, 0.0]]), centroids).tolist() == [0]


def test_nearest_centroid_accepts_single_vector():
    centroids = np.array([[0.0, 0.0], [2.0, 0.0]])
    assert nearest_centroid(np.array([1.9, 0.0]), centroids).tolist() == [1]


def test_separated_groups_get_separate_clusters(assigner):
    low, high = two_groups()
    model, assignments = assigner.fit_assign(histogram_bag(low + high))
    ids = dict(assignments.compute(scheduler="synchronous"))

    assert model.converged
    assert len({ids[(float(i), 0.0)] for i in range(3)}) == 1
    assert len({ids[(float(i), 0.0)] for i in range(3, 6)}) == 1
    assert ids[(0.0, 0.0)] != ids[(3.0, 0.0)]


def test_every_location_assigned_once_with_valid_id(make_config):
    rng = np.random.default_rng(7)
    vectors = [rng.random(5) for _ in range(40)]
    assigner = ClusterAssigner(make_config(NUM_CLUSTERS=4))

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ClusteringNonconvergence)
        model, assignments = assigner.fit_assign(histogram_bag(vectors, npartitions=3))
    rows = assignments.compute(scheduler="synchronous")

    assert len(rows) == 40
    assert len({loc for loc, _ in rows}) == 40
    assert all(0 <= cid < model.num_clusters for _, cid in rows)


def test_fit_is_deterministic_for_fixed_seed(make_config):
    rng = np.random.default_rng(11)
    vectors = [rng.random(4) for _ in range(25)]
    config = make_config(NUM_CLUSTERS=3)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ClusteringNonconvergence)
        first = ClusterAssigner(config).fit(db.from_sequence(vectors, npartitions=2))
        second = ClusterAssigner(config).fit(db.from_sequence(vectors, npartitions=5))

    np.testing.assert_allclose(first.centroids, second.centroids, atol=1e-12)
    assert first.n_iter == second.n_iter


def test_nonconvergence_warns_and_returns_capped_result(make_config):
    low, high = two_groups()
    config = make_config(clustering={"num_clusters": 2, "num_iterations": 1, "tolerance": 0.0})

    with pytest.warns(ClusteringNonconvergence, match="did not converge"):
        model = ClusterAssigner(config).fit(db.from_sequence(low + high, npartitions=2))

    assert not model.converged
    assert model.n_iter == 1
    assert model.centroids.shape == (2, 3)


def test_converges_when_centroids_stop_moving(assigner):
    vectors = [np.array([0.0, 1.0])] * 3 + [np.array([1.0, 0.0])] * 3

    model = assigner.fit(db.from_sequence(vectors, npartitions=2))

    assert model.converged
    assert model.n_iter == 1
    assert sorted(map(tuple, model.centroids)) == [(0.0, 1.0), (1.0, 0.0)]


def test_num_clusters_capped_at_vector_count(make_config, caplog):
    caplog.set_level(logging.WARNING)
    assigner = ClusterAssigner(make_config(NUM_CLUSTERS=3))
    vectors = [np.array([0.0, 1.0]), np.array([1.0, 0.0])]

    model, assignments = assigner.fit_assign(histogram_bag(vectors, npartitions=1))

    assert model.num_clusters == 2
    assert sorted(cid for _, cid in assignments.compute(scheduler="synchronous")) == [0, 1]
    assert "capping num_clusters" in caplog.text


def test_small_init_sample_still_fits_all_clusters(make_config, caplog):
    caplog.set_level(logging.WARNING)
    config = make_config(clustering={"num_clusters": 3, "init_sample_size": 2})
    vectors = [np.array([float(i), 0.0]) for i in range(12)]

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ClusteringNonconvergence)
        model = ClusterAssigner(config).fit(db.from_sequence(vectors, npartitions=3))

    assert model.num_clusters == 3
    assert "capping num_clusters" not in caplog.text


def test_cluster_without_members_keeps_its_centroid(assigner, monkeypatch):
    low, high = two_groups()
    seeds = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0], [50.0, 50.0, 50.0]])
    monkeypatch.setattr(assigner, "initial_centroids", lambda sample: seeds.copy())

    model = assigner.fit(db.from_sequence(low + high, npartitions=2))

    assert model.num_clusters == 3
    np.testing.assert_array_equal(model.centroids[2], seeds[2])
    np.testing.assert_allclose(model.centroids[0], np.mean(low, axis=0))


def test_no_vectors_raises(assigner):
    empty = db.from_sequence([np.zeros(3)], npartitions=1).filter(lambda v: False)
    with pytest.raises(ContractViolation, match="no histogram vectors"):
        assigner.fit(empty)


def test_model_predict():
    model = KMeansModel(centroids=np.array([[0.0, 0.0], [1.0, 1.0]]), n_iter=1, converged=True)
    assert model.predict(np.array([0.9, 0.8])) == 1
