import numpy as np

from pdfclust.core.record import GridRecord


def make_record(prec, lat=(10.0, 20.0), lon=(100.0, 110.0), year=2001, day=1, extra=None):
    """
    Build a GridRecord with YEAR / DAYOFJAN metadata.

    ``prec`` may be hourly ``[H, Lat, Lon]`` or daily ``[Lat, Lon]``.
    """
    metadata = {"YEAR": str(year), "DAYOFJAN": str(day)}
    metadata.update(extra or {})
    return GridRecord(
        lat=np.asarray(lat, dtype=float),
        lon=np.asarray(lon, dtype=float),
        prec=np.asarray(prec, dtype=float),
        metadata=metadata,
    )


def make_hourly_records(years=(2001, 2002), days=(1, 2), hours=2, shape=(2, 2), seed=0):
    """
    One random hourly record per (year, day), in year-major order.
    """
    rng = np.random.default_rng(seed)
    lat = np.linspace(10.0, 20.0, shape[0])
    lon = np.linspace(100.0, 110.0, shape[1])
    return [
        make_record(rng.random((hours,) + tuple(shape)), lat=lat, lon=lon, year=y, day=d)
        for y in years
        for d in days
    ]
