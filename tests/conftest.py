"""Shared fixtures: a tiny synthetic city."""

import json

import pandas as pd
import pytest

from rent_explorer.io import parse_districts, parse_network, parse_stops


def _square(lon, lat, size=0.01):
    return {
        "type": "Polygon",
        "coordinates": [[
            [lon, lat],
            [lon + size, lat],
            [lon + size, lat + size],
            [lon, lat + size],
            [lon, lat],
        ]],
    }


def _district(plz, name, price, lon, lat, **counts):
    props = {"plz": plz, "name": name, "price_area": price}
    props.update(counts)
    return {"type": "Feature", "properties": props, "geometry": _square(lon, lat)}


def _stop(fclass, name, lon, lat):
    props = {"fclass": fclass, "name": name}
    return {"type": "Feature", "properties": props,
            "geometry": {"type": "Point", "coordinates": [lon, lat]}}


@pytest.fixture
def districts_geojson():
    return {
        "type": "FeatureCollection",
        "features": [
            _district("80331", "Altstadt", 15.0, 11.57, 48.13, cafe=3, education=2),
            _district("80333", "Maxvorstadt", 19.5, 11.56, 48.14, stores=7),
            _district("80335", "Ludwigsvorstadt", 22.0, 11.55, 48.14),
            _district("80336", "Isarvorstadt", 26.1, 11.56, 48.12),
            _district("80337", "Sendling", 16.2, 11.55, 48.12),
            _district("80339", None, "NaN", 11.53, 48.13),
        ],
    }


@pytest.fixture
def network_geojson():
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {},
             "geometry": {"type": "LineString",
                          "coordinates": [[11.50, 48.14], [11.56, 48.14], [11.60, 48.15]]}},
            {"type": "Feature", "properties": {},
             "geometry": {"type": "MultiLineString",
                          "coordinates": [[[11.55, 48.10], [11.55, 48.18]],
                                          [[11.52, 48.12], [11.58, 48.16]]]}},
        ],
    }


@pytest.fixture
def stops_geojson():
    return {
        "type": "FeatureCollection",
        "features": [
            _stop("railway_station", "Hauptbahnhof", 11.5600, 48.1402),
            _stop("tram_stop", "Karlsplatz", 11.5655, 48.1393),
            _stop("bus_stop", "Sendlinger Tor", 11.5670, 48.1340),
            _stop("ferry_terminal", "Isar Ferry", 11.5850, 48.1300),
            _stop("bus_stop", "Marienplatz Bus", 11.5755, 48.1372),
        ],
    }


@pytest.fixture
def districts(districts_geojson):
    return parse_districts(districts_geojson)


@pytest.fixture
def network(network_geojson):
    return parse_network(network_geojson)


@pytest.fixture
def stops(stops_geojson):
    return parse_stops(stops_geojson)


@pytest.fixture
def rent_rows():
    # Text columns, as read from the listings CSV
    return pd.DataFrame({
        "newlyConst": ["0", "0", "1", "0"],
        "balcony": ["1", "1", "1", "0"],
        "lift": ["0", "0", "1", "0"],
        "garden": ["0", "0", "0", "1"],
        "serviceCharge": ["150", "150", "220.5", "90"],
        "livingSpace": ["65.0", "65", "80", "40"],
        "noRooms": ["2", "2", "3", "1.5"],
        "postal_code": ["80331", "80331", "80333", "80335"],
        "baseRent": ["1000", "1200", "1650.75", "720"],
    })


@pytest.fixture
def data_files(tmp_path, districts_geojson, network_geojson, stops_geojson, rent_rows):
    """Write the synthetic city to disk in the default directory layout."""
    park = tmp_path / "Park"
    park.mkdir()
    (park / "munich_layer.geojson").write_text(json.dumps(districts_geojson))
    (park / "Train_network.geojson").write_text(json.dumps(network_geojson))
    (park / "Transport.geojson").write_text(json.dumps(stops_geojson))
    rent_rows.to_csv(tmp_path / "df_calculator.csv", index=False)
    return tmp_path
