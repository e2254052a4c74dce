"""strata - bounded history of a mergeable value.

Recent state is kept at full resolution; older state is compacted by the
value's own merge into a chain of layers that grows only logarithmically
with the number of insertions.
"""

__version__ = "0.1.0"

from strata.protocols import Layer
from strata.snapshots import Snapshots, create, depth_bound
from strata.types import END, End, Stratum, StoreConfig, LayerInfo
from strata.errors import (
    StrataError,
    InvalidRatioError,
    InvariantViolation,
    NullValueError,
    TickOrderError,
)
