import numpy as np
import pytest

from pdfclust.contracts import FailurePolicy, InvalidGridShape
from pdfclust.data import GridRecordLoader
from tests.helpers.fake_records import make_hourly_records, make_record

pytestmark = pytest.mark.unit


@pytest.fixture
def netcdf_config(make_config, temp_dir):
    return make_config(SOURCE="netcdf", INPUT_DIR=str(temp_dir), SCHEDULER="synchronous")


def write_records(directory, records):
    paths = []
    for i, rec in enumerate(records):
        path = directory / f"day_{i:03d}.nc"
        rec.to_dataset().to_netcdf(path)
        paths.append(path)
    return paths


def test_discover_sorted_files(netcdf_config, temp_dir):
    write_records(temp_dir, make_hourly_records())
    (temp_dir / "notes.txt").write_text("ignored")

    paths = GridRecordLoader(netcdf_config).discover()

    assert [p.name for p in paths] == ["day_000.nc", "day_001.nc", "day_002.nc", "day_003.nc"]


def test_discover_missing_directory(make_config, temp_dir):
    config = make_config(SOURCE="netcdf", INPUT_DIR=str(temp_dir / "nope"))
    with pytest.raises(FileNotFoundError):
        GridRecordLoader(config).discover()


def test_read_restores_record(netcdf_config, temp_dir):
    original = make_hourly_records()[2]
    (path,) = write_records(temp_dir, [original])

    rec = GridRecordLoader(netcdf_config).read(path)

    np.testing.assert_allclose(rec.prec, original.prec)
    np.testing.assert_allclose(rec.lat, original.lat)
    assert (rec.year, rec.day) == (2002, 1)


def test_corrupt_file_is_skipped(netcdf_config, temp_dir, caplog):
    write_records(temp_dir, make_hourly_records())
    (temp_dir / "day_999.nc").write_bytes(b"not a netcdf file")
    loader = GridRecordLoader(netcdf_config)

    records = loader.load_all(loader.discover())

    assert len(records) == 4
    assert "Skipping record" in caplog.text
    assert "day_999.nc" in caplog.text


def test_corrupt_file_fails_fast(netcdf_config, temp_dir):
    bad = temp_dir / "bad.nc"
    bad.write_bytes(b"not a netcdf file")
    loader = GridRecordLoader(netcdf_config, on_error=FailurePolicy.FAIL_FAST)

    with pytest.raises(Exception):
        loader.load(bad)


def test_missing_metadata_is_skipped(netcdf_config, temp_dir):
    ds = make_record(np.ones((2, 2, 2))).to_dataset()
    del ds.attrs["YEAR"]
    path = temp_dir / "no_year.nc"
    ds.to_netcdf(path)

    assert GridRecordLoader(netcdf_config).load(path) is None
    with pytest.raises(ValueError, match="YEAR"):
        GridRecordLoader(netcdf_config).read(path)


def test_inconsistent_grid_raises_under_skip_policy(netcdf_config, temp_dir):
    ds = make_record(np.ones((2, 2, 2))).to_dataset().transpose("lat", "hour", "lon")
    path = temp_dir / "transposed.nc"
    ds.to_netcdf(path)

    with pytest.raises(InvalidGridShape):
        GridRecordLoader(netcdf_config).load(path)


def test_load_bag_is_lazy_and_drops_skipped(netcdf_config, temp_dir):
    paths = write_records(temp_dir, make_hourly_records())
    bad = temp_dir / "day_bad.nc"
    bad.write_bytes(b"garbage")

    bag = GridRecordLoader(netcdf_config).load_bag(paths + [bad], npartitions=2)
    records = bag.compute(scheduler="synchronous")

    assert len(records) == 4
    assert sorted((r.year, r.day) for r in records) == [(2001, 1), (2001, 2), (2002, 1), (2002, 2)]


def test_load_bag_without_files(netcdf_config):
    with pytest.raises(FileNotFoundError):
        GridRecordLoader(netcdf_config).load_bag([], npartitions=2)
