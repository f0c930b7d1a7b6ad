"""rent_explorer: district rent map with transit overlays and a rent calculator."""

from .config import DataPaths, MapConfig
from .dashboard import DashboardController, DashboardState
from .districts import DistrictLayer, HighlightState
from .io import LoadFailure, default_jobs, load_sources
from .legend import LegendState
from .models import DistrictFeature, StopCategory, TransitNetwork, TransitStop
from .rent_index import NO_MATCH, RentEstimate, RentIndex, RentQuery
from .viewport import ClusterGroupState, VisibilityPolicy
from .visualization.colors import cluster_color, district_color

__all__ = [
    # config
    "DataPaths",
    "MapConfig",
    # models
    "DistrictFeature",
    "StopCategory",
    "TransitNetwork",
    "TransitStop",
    # io
    "LoadFailure",
    "default_jobs",
    "load_sources",
    # colours
    "cluster_color",
    "district_color",
    # layers
    "DistrictLayer",
    "HighlightState",
    "ClusterGroupState",
    "VisibilityPolicy",
    "LegendState",
    # rent calculator
    "RentIndex",
    "RentQuery",
    "RentEstimate",
    "NO_MATCH",
    # dashboard
    "DashboardController",
    "DashboardState",
]
