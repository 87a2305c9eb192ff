"""Record sources: synthetic calibration data and NetCDF day files."""

from pdfclust.data.synthetic import make_calibration_records
from pdfclust.data.loader import GridRecordLoader

__all__ = ['make_calibration_records', 'GridRecordLoader']
