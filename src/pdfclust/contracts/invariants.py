"""Formal pipeline invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "record": [
        "lat and lon are 1-D float64 arrays",
        "prec is [H, Lat, Lon] or [Lat, Lon] and agrees with len(lat), len(lon)",
        "Arrays are read-only; stages create new records via with_prec()",
    ],

    "temporal": [
        "Input prec is [H, Lat, Lon] with H > 0",
        "Output prec is [Lat, Lon]: sum of hour slices divided by H",
        "lat, lon and metadata are carried over unchanged",
    ],

    "cohort": [
        "Every record keeps its metadata (YEAR survives subtraction)",
        "Output prec = input prec - mean over records with the same day key",
        "Anomalies of one cohort sum to zero within 1e-9",
        "A single-member cohort yields an all-zero anomaly",
    ],

    "flatten": [
        "Exactly Lat x Lon ((lat, lon), value) pairs per record",
        "Duplicate coordinates are emitted, not merged",
    ],

    "binning": [
        "Global range max - min > 0, otherwise DegenerateRange",
        "Bins are inclusive on both edges (interior boundary values count twice)",
        "Counts are divided by the total number of input days",
        "Every vector has num_bins finite non-negative entries",
    ],

    "clustering": [
        "Every location appears in exactly one assignment",
        "cluster_id in [0, num_clusters)",
        "Nearest centroid under Euclidean distance, lowest index on ties",
    ],
}

# Global synchronization points; everything else is a lazy per-partition map
BARRIERS = {
    "cohort": "per-day sums and counts of every record (anomalies persisted)",
    "binning": "min/max over every flattened value (plus input record count)",
    "clustering": "partial sums of every histogram vector, once per iteration",
}
