"""Loading of the district, network, stop and listings files.

Each ``load_*`` function reads one file and returns parsed records,
raising :class:`LoadFailure` for anything that keeps the layer from
being built.  :func:`load_sources` runs them concurrently and reports
each result to the dashboard as it arrives.
"""

from __future__ import annotations

import asyncio
import json
import math
from typing import Callable, List, Mapping, Sequence, Tuple

import pandas as pd
from loguru import logger

from .events import DataKind, DataLoaded, LoadFailed
from .models import FACILITY_CATEGORIES, DistrictFeature, StopCategory, TransitNetwork, TransitStop
from .rent_index import RentIndex
from .visualization.colors import as_price


class LoadFailure(Exception):
    """A data file could not be fetched or parsed."""

    def __init__(self, kind: DataKind, path: str, reason: str) -> None:
        super().__init__(f"Failed to load {kind.value} from {path}: {reason}")
        self.kind = kind
        self.path = path
        self.reason = reason


def read_geojson(path: str, kind: DataKind) -> dict:
    """Read a GeoJSON FeatureCollection from *path*."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise LoadFailure(kind, path, str(e)) from e
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise LoadFailure(kind, path, "no 'features' array")
    return data


def _count(value: object) -> int:
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def parse_districts(geojson: dict) -> List[DistrictFeature]:
    """Turn district features into records, defaulting missing attributes."""
    districts = []
    for i, feature in enumerate(geojson.get("features", [])):
        props = feature.get("properties") or {}
        plz = props.get("plz")
        districts.append(DistrictFeature(
            postal_code=str(plz).strip() if plz is not None else "",
            name=props.get("name") or f"Unnamed {i + 1}",
            price_area=as_price(props.get("price_area")),
            counts={c: _count(props.get(c)) for c in FACILITY_CATEGORIES},
            geometry=feature.get("geometry") or {},
        ))
    unpriced = sum(1 for d in districts if math.isnan(d.price_area))
    if unpriced:
        logger.debug(f"{unpriced} districts without a usable price_area")
    return districts


def _line_paths(geometry: Mapping) -> List[List[Tuple[float, float]]]:
    gtype = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if gtype == "LineString":
        lines = [coords]
    elif gtype == "MultiLineString":
        lines = coords
    else:
        return []
    return [[(float(pt[1]), float(pt[0])) for pt in line] for line in lines]


def parse_network(geojson: dict) -> TransitNetwork:
    """Collect every line of a network FeatureCollection.

    Parameters
    ----------
    geojson : dict
        Parsed FeatureCollection.  ``MultiLineString`` features contribute
        one path per member line; non-line geometries are skipped.

    Returns
    -------
    TransitNetwork
        Paths of ``(lat, lon)`` vertices; paths with fewer than two
        vertices are dropped.
    """
    paths = []
    for feature in geojson.get("features", []):
        paths.extend(_line_paths(feature.get("geometry") or {}))
    return TransitNetwork.from_paths(paths)


def parse_stops(geojson: dict) -> List[TransitStop]:
    """Turn point features into stops; non-point features are skipped."""
    stops = []
    skipped = 0
    for i, feature in enumerate(geojson.get("features", [])):
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates")
        if geometry.get("type") != "Point" or not coords or len(coords) < 2:
            skipped += 1
            continue
        props = feature.get("properties") or {}
        stops.append(TransitStop(
            stop_id=i,
            category=StopCategory.parse(props.get("fclass")),
            name=props.get("name") or "Transport Stop",
            lat=float(coords[1]),
            lon=float(coords[0]),
        ))
    if skipped:
        logger.warning(f"Skipped {skipped} stop features without point geometry")
    return stops


def load_districts(path: str) -> List[DistrictFeature]:
    """Load the district polygons.

    Parameters
    ----------
    path : str
        GeoJSON FeatureCollection of postal-code polygons with ``plz``,
        ``name``, ``price_area`` and facility-count properties.

    Returns
    -------
    list of DistrictFeature
        One record per feature, in file order.

    Raises
    ------
    LoadFailure
        If the file is missing, is not JSON, or holds malformed features.
    """
    try:
        return parse_districts(read_geojson(path, DataKind.DISTRICTS))
    except (TypeError, ValueError, AttributeError) as e:
        raise LoadFailure(DataKind.DISTRICTS, path, str(e)) from e


def load_network(path: str) -> TransitNetwork:
    """Load the train network lines.

    Parameters
    ----------
    path : str
        GeoJSON FeatureCollection of ``LineString`` / ``MultiLineString``
        features.  Other geometry types are ignored.

    Returns
    -------
    TransitNetwork

    Raises
    ------
    LoadFailure
        If the file cannot be read or a line has malformed coordinates.
    """
    try:
        return parse_network(read_geojson(path, DataKind.NETWORK))
    except (TypeError, ValueError, IndexError, AttributeError) as e:
        raise LoadFailure(DataKind.NETWORK, path, str(e)) from e


def load_stops(path: str) -> List[TransitStop]:
    """Load the transit stops.

    Parameters
    ----------
    path : str
        GeoJSON FeatureCollection of ``Point`` features with ``fclass``
        and ``name`` properties.

    Returns
    -------
    list of TransitStop
        ``stop_id`` is the feature's index in the file.

    Raises
    ------
    LoadFailure
        If the file cannot be read or a point has malformed coordinates.
    """
    try:
        return parse_stops(read_geojson(path, DataKind.STOPS))
    except (TypeError, ValueError, AttributeError) as e:
        raise LoadFailure(DataKind.STOPS, path, str(e)) from e


def load_rent_table(path: str) -> RentIndex:
    """Read the listings CSV and build the rent index from it.

    Every column is read as text and blank lines are skipped; the index
    normalizes the key columns itself.

    Parameters
    ----------
    path : str
        CSV with the listing key columns and ``baseRent``.

    Returns
    -------
    RentIndex

    Raises
    ------
    LoadFailure
        If the file cannot be parsed or a required column is missing.
    """
    try:
        rows = pd.read_csv(path, dtype=str, skip_blank_lines=True)
        return RentIndex(rows)
    except (OSError, ValueError, KeyError) as e:
        raise LoadFailure(DataKind.RENT_TABLE, path, str(e)) from e


LOADERS: Mapping[DataKind, Callable[[str], object]] = {
    DataKind.DISTRICTS: load_districts,
    DataKind.NETWORK: load_network,
    DataKind.STOPS: load_stops,
    DataKind.RENT_TABLE: load_rent_table,
}


def default_jobs(paths) -> List[Tuple[DataKind, Callable[[], object]]]:
    """One zero-argument loader per file in a :class:`DataPaths`."""
    targets = {
        DataKind.DISTRICTS: paths.districts,
        DataKind.NETWORK: paths.network,
        DataKind.STOPS: paths.stops,
        DataKind.RENT_TABLE: paths.rent_table,
    }
    return [
        (kind, lambda loader=LOADERS[kind], path=path: loader(path))
        for kind, path in targets.items()
    ]


def _fail(kind: DataKind, reason: str, dispatch: Callable) -> None:
    logger.error(f"Failed to load {kind.value}: {reason}")
    dispatch(LoadFailed(kind, reason))


async def _run_job(kind: DataKind, job: Callable[[], object], dispatch: Callable) -> None:
    try:
        payload = await asyncio.to_thread(job)
    except LoadFailure as e:
        _fail(kind, e.reason, dispatch)
        return
    except Exception as e:
        logger.exception(f"Unexpected error loading {kind.value}")
        _fail(kind, repr(e), dispatch)
        return
    # A payload the dashboard cannot build fails only its own kind.
    try:
        dispatch(DataLoaded(kind, payload))
    except Exception as e:
        logger.exception(f"Could not apply {kind.value}")
        _fail(kind, repr(e), dispatch)


async def load_sources(
    jobs: Sequence[Tuple[DataKind, Callable[[], object]]],
    dispatch: Callable,
) -> None:
    """Run every job once, dispatching each result as soon as it completes.

    Parameters
    ----------
    jobs : sequence of (DataKind, callable)
        Zero-argument loaders, each run in a worker thread.
    dispatch : callable
        Receives one ``DataLoaded`` or ``LoadFailed`` per job.  A job that
        raises, or whose payload *dispatch* rejects, is reported as
        ``LoadFailed`` and never stops the other jobs.
    """
    await asyncio.gather(*(_run_job(kind, job, dispatch) for kind, job in jobs))
