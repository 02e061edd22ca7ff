# tests/test_bill_of_materials.py
import pandas as pd
import pytest

from closure_planner.bill_of_materials import (
    COLUMNS,
    summarize_devices,
    total_cost,
    write_bill_of_materials,
)
from closure_planner.models import Device
from closure_planner.signs import CATALOG_VERSION


def _device(code, quantity, phase="all", lat=43.65, lng=-79.40, cost=None):
    return Device(code, quantity, "Main St", 0, "r", 0.9, phase, lat, lng, cost)


def test_empty():
    df = summarize_devices([], [{"id": "race"}])
    assert df.empty
    assert list(df.columns) == COLUMNS
    assert total_cost([]) == 0


def test_rows_per_phase_and_code():
    devices = [
        _device("TC-54", 11),
        _device("TC-54", 5, lat=43.66),
        _device("Rb-92", 1, phase="race"),
    ]
    df = summarize_devices(devices, [{"id": "setup"}, {"id": "race"}])

    assert list(zip(df["phase"], df["code"])) == [
        ("setup", "TC-54"),
        ("race", "TC-54"),
        ("race", "Rb-92"),
        ("all", "TC-54"),
    ]
    drums = df[(df["phase"] == "race") & (df["code"] == "TC-54")].iloc[0]
    assert drums["name"] == "Flexible Drums (Barrels)"
    assert drums["quantity"] == 16
    assert drums["unit_cost"] == pytest.approx(15.0)
    assert drums["total_cost"] == pytest.approx(240.0)
    assert drums["locations"] == "43.65000,-79.40000; 43.66000,-79.40000"


def test_event_and_phase_columns():
    phases = [{"id": "race", "name": "Race", "time": "08:00-12:00"}]
    df = summarize_devices([_device("TC-54", 11), _device("Rb-92", 1, phase="race")], phases,
                           event_name="Toronto 10K")

    assert set(df["event"]) == {"Toronto 10K"}
    race = df[df["phase"] == "race"].iloc[0]
    assert (race["phase_name"], race["phase_time"]) == ("Race", "08:00-12:00")
    shared = df[df["phase"] == "all"].iloc[0]
    assert (shared["phase_name"], shared["phase_time"]) == ("All Phases", "All Day")


def test_named_all_phase():
    df = summarize_devices([_device("TC-54", 11)], [{"id": "all", "name": "All Day"}])
    assert list(df["phase_name"]) == ["All Day"]
    assert list(df["event"]) == ["Event"]


def test_unknown_code_and_price_override():
    df = summarize_devices([_device("sandbag_wall", 2, cost=40.0)], [{"id": "all"}])
    row = df.iloc[0]
    assert (row["phase"], row["name"], row["unit_cost"], row["total_cost"]) == ("all", "sandbag wall", 40.0, 80.0)


def test_csv_names_sign_catalog(tmp_path):
    out = tmp_path / "bom.csv"
    write_bill_of_materials(summarize_devices([_device("TC-54", 11)], [{"id": "race"}]), out)

    with open(out, encoding="utf-8") as f:
        assert f.readline().strip() == f"# Sign catalog: {CATALOG_VERSION}"
    back = pd.read_csv(out, comment="#")
    assert list(back.columns) == COLUMNS
    assert list(back["quantity"]) == [11, 11]


def test_total_cost():
    devices = [_device("TC-54", 11), _device("TC-67", 1), _device("XX-9", 3)]
    assert total_cost(devices) == pytest.approx(165.0 + 20.0 + 45.0)
