"""IMS stock counts reconciled against weight-derived quantities from scales."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from app.core.refs import RefMap, VariantRef


@dataclass(frozen=True)
class SensorReading:
    variant_id: int
    current_weight: float
    updated_at: datetime


@dataclass(frozen=True)
class DiscrepancyRecord:
    location_id: int
    variant_id: int
    ims_quantity: float
    sensor_quantity: float

    @property
    def discrepancy(self) -> float:
        return self.ims_quantity - self.sensor_quantity

    def as_row(self) -> dict:
        # rounding happens here only, for display
        return {
            "locationId": self.location_id,
            "variantId": self.variant_id,
            "imsQuantity": self.ims_quantity,
            "sensorQuantity": fixed3(self.sensor_quantity),
            "discrepancy": fixed3(self.discrepancy),
        }


def fixed3(value: float) -> str:
    # + 0.0 folds -0.0 into 0.0 so float noise never prints as "-0.000"
    return f"{round(value, 3) + 0.0:.3f}"


def latest_readings(readings: Iterable[SensorReading]) -> RefMap[int, SensorReading]:
    latest: dict[int, SensorReading] = {}
    for r in readings:
        seen = latest.get(r.variant_id)
        if seen is None or r.updated_at > seen.updated_at:
            latest[r.variant_id] = r
    return RefMap(latest)


def sensor_quantity(reading: Optional[SensorReading], variant: Optional[VariantRef]) -> float:
    if reading is None or variant is None or not variant.unit_weight:
        return 0.0
    return reading.current_weight / variant.unit_weight


def reconcile(
    on_hand_rows: Iterable[dict],
    readings: Iterable[SensorReading],
    variants: RefMap[int, VariantRef],
) -> list[DiscrepancyRecord]:
    """One record per on-hand (location, variant) row, in input order."""
    latest = latest_readings(readings)
    records = []
    for row in on_hand_rows:
        variant_id = row["variantId"]
        reading = latest.lookup_or(variant_id, None)
        variant = variants.lookup_or(variant_id, None)
        records.append(DiscrepancyRecord(
            location_id=row["locationId"],
            variant_id=variant_id,
            ims_quantity=row["ims_quantity"] or 0,
            sensor_quantity=sensor_quantity(reading, variant),
        ))
    return records
