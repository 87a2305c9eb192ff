import logging

import dask.bag as db
import numpy as np
import pytest

from pdfclust.contracts import ContractViolation, DegenerateRange, InvalidGridShape
from pdfclust.core.record import GridRecord
from pdfclust.data import make_calibration_records
from pdfclust.pipeline import ClusteringResult, PdfClusteringProcessor
from tests.helpers.fake_records import make_record

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def test_calibration_run_end_to_end(sync_config):
    records = make_calibration_records(sync_config)
    result = PdfClusteringProcessor(sync_config).run(records)

    assert isinstance(result, ClusteringResult)
    assert result.total_record_count == 4

    df = result.to_dataframe()
    assert list(df.columns) == ["lat", "lon", "cluster_id"]
    assert len(df) == 4
    assert df["cluster_id"].between(0, 2).all()
    assert not df.duplicated(subset=["lat", "lon"]).any()

    assert result.centroids.shape == (3, 10)


def test_histograms_sum_to_one_without_boundary_hits(sync_config):
    result = PdfClusteringProcessor(sync_config).run(make_calibration_records(sync_config))
    hist = result.histograms_dataframe()

    bins = [f"bin_{b}" for b in range(10)]
    assert list(hist.columns) == ["lat", "lon", *bins]
    # every location has one anomaly per day, all of them inside [min, max]
    np.testing.assert_allclose(hist[bins].sum(axis=1), 1.0)


def test_run_is_deterministic(sync_config):
    records = make_calibration_records(sync_config)
    first = PdfClusteringProcessor(sync_config).run(records).to_dataframe()
    second = PdfClusteringProcessor(sync_config).run(records).to_dataframe()

    assert first.equals(second)


def test_run_accepts_dask_bag(sync_config):
    bag = db.from_sequence(make_calibration_records(sync_config), npartitions=3)
    result = PdfClusteringProcessor(sync_config).run(bag)

    assert len(result.to_dataframe()) == 4


def test_each_input_record_is_read_once(sync_config):
    reads = []

    def read(record):
        reads.append(record.metadata["DAYOFJAN"])
        return record

    bag = db.from_sequence(make_calibration_records(sync_config), npartitions=2).map(read)
    result = PdfClusteringProcessor(sync_config).run(bag)
    result.to_dataframe()
    result.histograms_dataframe()

    assert len(reads) == 4


def test_threads_scheduler_matches_synchronous(make_config, sync_config):
    records = make_calibration_records(sync_config)
    sync = PdfClusteringProcessor(sync_config).run(records).to_dataframe()
    threaded = PdfClusteringProcessor(make_config(SCHEDULER="threads")).run(records).to_dataframe()

    assert sync.equals(threaded)


def test_separates_wet_and_dry_locations(make_config):
    config = make_config(SCHEDULER="synchronous", NUM_CLUSTERS=2, NUM_BINS=4,
                         START_YEAR=2001, END_YEAR=2004, NUM_DAYS=1)
    lat, lon = (0.0, 1.0), (0.0, 1.0, 2.0)
    # column 0 swings between wet and dry years, columns 1-2 stay flat
    records = []
    for i, year in enumerate(range(2001, 2005)):
        day = np.array([[10.0 * (i % 2), 1.0, 1.0], [10.0 * (i % 2), 1.0, 1.0]])
        records.append(make_record(np.stack([day, day]), lat=lat, lon=lon, year=year, day=1))

    df = PdfClusteringProcessor(config).run(records).to_dataframe()
    ids = {(r.lat, r.lon): r.cluster_id for r in df.itertuples()}

    assert ids[(0.0, 0.0)] == ids[(1.0, 0.0)]
    assert ids[(0.0, 1.0)] == ids[(0.0, 2.0)] == ids[(1.0, 1.0)] == ids[(1.0, 2.0)]
    assert ids[(0.0, 0.0)] != ids[(0.0, 1.0)]


def test_record_count_mismatch_is_logged(sync_config, caplog):
    caplog.set_level(logging.WARNING)
    records = make_calibration_records(sync_config)[:3]

    result = PdfClusteringProcessor(sync_config).run(records)

    assert result.total_record_count == 3
    assert "describes 4" in caplog.text


def test_flat_input_raises_degenerate_range(sync_config, caplog):
    records = [make_record(np.ones((2, 2, 2)), year=y, day=d) for y in (2001, 2002) for d in (1, 2)]

    with pytest.raises(DegenerateRange):
        PdfClusteringProcessor(sync_config).run(records)
    assert "contract violated" in caplog.text


def test_daily_input_raises_invalid_grid_shape(sync_config):
    records = [make_record(np.ones((2, 2)), year=2001, day=1)]

    with pytest.raises(InvalidGridShape):
        PdfClusteringProcessor(sync_config).run(records)


def test_missing_day_metadata_aborts_with_stage_and_key(sync_config, caplog):
    record = make_record(np.ones((2, 2, 2)))
    records = [GridRecord(record.lat, record.lon, record.prec, {"YEAR": "2001"})]

    with pytest.raises(ContractViolation, match="no 'DAYOFJAN' entry") as excinfo:
        PdfClusteringProcessor(sync_config).run(records)

    assert excinfo.value.stage == "cohort"
    assert excinfo.value.key == {"YEAR": "2001"}
    assert "Aborting run (stage=cohort" in caplog.text


def test_non_integer_day_metadata_aborts(sync_config):
    records = [make_record(np.ones((2, 2, 2)), day="first")]

    with pytest.raises(ContractViolation, match="not an integer") as excinfo:
        PdfClusteringProcessor(sync_config).run(records)
    assert excinfo.value.stage == "cohort"


def test_empty_input_raises(sync_config):
    with pytest.raises(ContractViolation, match="no input records"):
        PdfClusteringProcessor(sync_config).run([])


def test_centroids_dataset_has_bin_edges(sync_config):
    result = PdfClusteringProcessor(sync_config).run(make_calibration_records(sync_config))
    ds = result.centroids_dataset()

    assert ds["centroid"].dims == ("cluster", "bin")
    assert ds["bin_upper"].values[-1] == result.bin_range.max_prec
    assert ds.attrs["total_record_count"] == 4
    assert ds.attrs["converged"] in (0, 1)
