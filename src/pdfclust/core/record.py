"""GridRecord: one day's gridded observation bundle.

A record holds the latitude and longitude axes, the precipitation field and
a small string metadata dictionary (e.g. ``YEAR`` and ``DAYOFJAN``). Records
are immutable: every pipeline stage produces a new record through
``with_prec()``, sharing the unchanged lat/lon arrays and metadata.
"""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np
import xarray as xr

from pdfclust.contracts.base import require
from pdfclust.contracts.failure import InvalidGridShape

__all__ = ['GridRecord', 'DEFAULT_YEAR_KEY', 'DEFAULT_DAY_KEY']

logger = logging.getLogger(__name__)

DEFAULT_YEAR_KEY = "YEAR"
DEFAULT_DAY_KEY = "DAYOFJAN"


def _readonly(values) -> np.ndarray:
    """Return a float64 read-only array, reusing already frozen input."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.flags.writeable:
        arr = arr.view()
        arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class GridRecord:
    """Immutable lat/lon/precipitation record with string metadata.

    Parameters
    ----------
    lat : array-like
        1-D latitude values, length Lat.
    lon : array-like
        1-D longitude values, length Lon.
    prec : array-like
        Precipitation, either hourly ``[H, Lat, Lon]`` or daily ``[Lat, Lon]``.
    metadata : mapping of str to str
        Opaque string values; the year and day keys are parsed as integers
        for grouping.

    Raises
    ------
    InvalidGridShape
        If the arrays are not mutually consistent.
    """

    lat: np.ndarray
    lon: np.ndarray
    prec: np.ndarray
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        lat = _readonly(self.lat)
        lon = _readonly(self.lon)
        prec = _readonly(self.prec)
        meta = self.metadata
        if not isinstance(meta, MappingProxyType):
            meta = MappingProxyType({str(k): str(v) for k, v in meta.items()})

        require(lat.ndim == 1, f"'lat' must be 1-D, got shape {lat.shape}",
                InvalidGridShape, stage="record")
        require(lon.ndim == 1, f"'lon' must be 1-D, got shape {lon.shape}",
                InvalidGridShape, stage="record")
        require(prec.ndim in (2, 3),
                f"'prec' must be [H, Lat, Lon] or [Lat, Lon], got shape {prec.shape}",
                InvalidGridShape, stage="record")
        require(prec.shape[-2:] == (lat.shape[0], lon.shape[0]),
                f"'prec' grid {prec.shape[-2:]} does not match "
                f"lat/lon lengths ({lat.shape[0]}, {lon.shape[0]})",
                InvalidGridShape, stage="record")

        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lon", lon)
        object.__setattr__(self, "prec", prec)
        object.__setattr__(self, "metadata", meta)

    @property
    def variables(self) -> Mapping[str, np.ndarray]:
        """Named arrays of the record ("lat", "lon", "prec")."""
        return MappingProxyType({"lat": self.lat, "lon": self.lon, "prec": self.prec})

    @property
    def grid_shape(self) -> tuple:
        return (self.lat.shape[0], self.lon.shape[0])

    def meta_int(self, key: str) -> int:
        """Parse a metadata value as an integer."""
        try:
            return int(self.metadata[key])
        except KeyError:
            raise KeyError(f"Record metadata has no '{key}' entry "
                           f"(available: {sorted(self.metadata)})") from None

    @property
    def year(self) -> int:
        """Shortcut for ``meta_int("YEAR")``.

        Only valid for the default metadata keys; pipeline stages read
        ``global.metadata_keys`` through ``meta_int`` instead.
        """
        return self.meta_int(DEFAULT_YEAR_KEY)

    @property
    def day(self) -> int:
        """Shortcut for ``meta_int("DAYOFJAN")`` (default keys only)."""
        return self.meta_int(DEFAULT_DAY_KEY)

    def with_prec(self, prec) -> "GridRecord":
        """Copy of this record with only the precipitation field replaced."""
        return replace(self, prec=prec)

    def to_dataset(self, var_names: Optional[Mapping[str, str]] = None) -> xr.Dataset:
        """Convert to an xarray Dataset (metadata stored in attrs)."""
        names = {"lat": "lat", "lon": "lon", "prec": "prec"}
        names.update(var_names or {})
        lat_name, lon_name = names["lat"], names["lon"]
        dims = (lat_name, lon_name) if self.prec.ndim == 2 else ("hour", lat_name, lon_name)
        return xr.Dataset(
            {names["prec"]: (dims, np.array(self.prec))},
            coords={lat_name: np.array(self.lat), lon_name: np.array(self.lon)},
            attrs=dict(self.metadata),
        )

    @classmethod
    def from_dataset(cls, ds: xr.Dataset,
                     var_names: Optional[Mapping[str, str]] = None) -> "GridRecord":
        """Build a record from an xarray Dataset.

        The precipitation variable must have lat and lon as its last two
        dimensions; string attrs become metadata.
        """
        names = {"lat": "lat", "lon": "lon", "prec": "prec"}
        names.update(var_names or {})
        for role in ("lat", "lon", "prec"):
            require(names[role] in ds.variables,
                    f"dataset has no '{names[role]}' variable",
                    InvalidGridShape, stage="record")

        prec = ds[names["prec"]]
        require(prec.dims[-2:] == (names["lat"], names["lon"]),
                f"'{names['prec']}' dims {prec.dims} must end with "
                f"({names['lat']}, {names['lon']})",
                InvalidGridShape, stage="record")

        metadata = {str(k): str(v) for k, v in ds.attrs.items()}
        return cls(
            lat=ds[names["lat"]].values,
            lon=ds[names["lon"]].values,
            prec=prec.values,
            metadata=metadata,
        )

    def __reduce__(self):
        # mappingproxy is not picklable; rebuild through __init__ instead
        return (type(self), (self.lat, self.lon, self.prec, dict(self.metadata)))

    def __repr__(self):
        return (f"GridRecord(prec_shape={self.prec.shape}, "
                f"metadata={dict(self.metadata)})")
