from dataclasses import replace

import pandas as pd

from .recommender import calculate_device_cost
from .signs import CATALOG_VERSION, get_sign

COLUMNS = [
    "event", "phase", "phase_name", "phase_time",
    "code", "name", "quantity", "unit_cost", "total_cost", "locations",
]

ALL_PHASES = {"id": "all", "name": "All Phases", "time": "All Day"}


def _summarize(event_name, phase, devices):
    rows = {}
    for d in devices:
        row = rows.get(d.code)
        if row is None:
            sign = get_sign(d.code)
            row = rows[d.code] = {
                "event": event_name,
                "phase": str(phase["id"]),
                "phase_name": phase.get("name") or str(phase["id"]),
                "phase_time": phase.get("time") or "",
                "code": d.code,
                "name": sign.name if sign else d.code.replace("_", " "),
                "quantity": 0,
                "unit_cost": calculate_device_cost(replace(d, quantity=1)),
                "total_cost": 0.0,
                "locations": [],
            }
        row["quantity"] += d.quantity or 1
        row["total_cost"] += calculate_device_cost(d)
        row["locations"].append(f"{d.lat:.5f},{d.lng:.5f}")
    return list(rows.values())


def summarize_devices(devices, phases=None, event_name="Event"):
    """
    Bill of materials: one row per (phase, device code).

    Devices planned for phase ``all`` are needed in every phase, so they are
    counted under each phase and once more under ``all``. Phases are mappings
    with an ``id`` and optional ``name`` and ``time``.
    """
    rows = []
    all_phase = dict(ALL_PHASES)
    for phase in phases or []:
        pid = str(phase["id"])
        if pid == "all":
            all_phase.update({k: v for k, v in phase.items() if v})
            continue
        rows.extend(_summarize(event_name, phase, [d for d in devices if d.phase in (pid, "all")]))
    shared = [d for d in devices if d.phase == "all"]
    if shared:
        rows.extend(_summarize(event_name, all_phase, shared))

    df = pd.DataFrame(rows, columns=COLUMNS)
    if not df.empty:
        df["locations"] = df["locations"].map("; ".join)
    return df


def write_bill_of_materials(df, outfile):
    """CSV with a leading comment naming the sign catalog the costs come from."""
    with open(outfile, "w", encoding="utf-8", newline="") as f:
        f.write(f"# Sign catalog: {CATALOG_VERSION}\n")
        df.to_csv(f, index=False)


def total_cost(devices):
    return round(sum(calculate_device_cost(d) for d in devices), 2)
