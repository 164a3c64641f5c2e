"""Clasificador de umbrales de temperatura.

Convierte (tipo, valor °C) en un veredicto ok / warn / fail:
- Neveras:      ≤ 5 OK, ≤ 8 WARNING, > 8 FAIL (acción correctiva)
- Congeladores: ≤ -18 OK, ≤ -15 WARNING, > -15 FAIL
- Alimentos:    ≥ estándar OK (75 por defecto, 82 en Escocia), < estándar FAIL
- Entregas:     mismas bandas que neveras (provisional)

Función pura y total para floats finitos. Los NaN/Infinity se rechazan
en el borde de ingesta, no aquí.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.domain.models import ComplianceVerdict, ReadingKind, VerdictStatus

DEFAULT_FOOD_STANDARD_C = 75.0
SCOTLAND_FOOD_STANDARD_C = 82.0


@dataclass(frozen=True)
class ThresholdBand:
    """Bandas para equipos en frío: valor ≤ ok_max OK, ≤ warn_max WARNING."""

    ok_max: float
    warn_max: float

    def status_for(self, value: float) -> VerdictStatus:
        if value <= self.ok_max:
            return VerdictStatus.OK
        if value <= self.warn_max:
            return VerdictStatus.WARN
        return VerdictStatus.FAIL

    def describe(self, title: str) -> str:
        return (
            f"{title}: ≤ {self.ok_max:g}°C OK, {self.ok_max:g} to {self.warn_max:g}°C warning, "
            f"> {self.warn_max:g}°C action"
        )


CHILLED_BAND = ThresholdBand(ok_max=5.0, warn_max=8.0)
FROZEN_BAND = ThresholdBand(ok_max=-18.0, warn_max=-15.0)

# TODO: reglas de entrega por proveedor (refrigerado / congelado / caliente ≥ 63°C)
# cuando exista el campo de tipo de entrega.
DELIVERY_BAND = CHILLED_BAND

_BANDS = {
    ReadingKind.FRIDGE: (CHILLED_BAND, "Fridge", "Chilled"),
    ReadingKind.FREEZER: (FROZEN_BAND, "Freezer", "Frozen"),
    ReadingKind.DELIVERY: (DELIVERY_BAND, "Delivery", "Chilled delivery"),
}


def _band_verdict(band: ThresholdBand, label: str, title: str, value: float) -> ComplianceVerdict:
    status = band.status_for(value)
    standard = band.describe(title)
    if status == VerdictStatus.OK:
        return ComplianceVerdict(
            status=status,
            requires_action=False,
            message=f"{label} OK ({value:.1f}°C, ≤{band.ok_max:g}°C)",
            standard=standard,
        )
    if status == VerdictStatus.WARN:
        return ComplianceVerdict(
            status=status,
            requires_action=False,
            message=f"{label} warning ({value:.1f}°C, {band.ok_max:g} to {band.warn_max:g}°C) - monitor and recheck",
            standard=standard,
        )
    return ComplianceVerdict(
        status=status,
        requires_action=True,
        message=f"{label} FAIL ({value:.1f}°C, >{band.warn_max:g}°C) - corrective action required",
        standard=standard,
    )


def classify(
    kind: Union[ReadingKind, str],
    value_c: float,
    food_standard_c: Optional[float] = None,
) -> ComplianceVerdict:
    """Clasifica una lectura de temperatura.

    Args:
        kind: fridge / freezer / food / delivery
        value_c: Valor en °C (finito)
        food_standard_c: Temperatura mínima de núcleo para alimentos

    Returns:
        ComplianceVerdict con estado, flag de acción y mensaje legible
    """
    kind = ReadingKind(kind)

    if kind == ReadingKind.FOOD:
        standard_c = DEFAULT_FOOD_STANDARD_C if food_standard_c is None else float(food_standard_c)
        standard = f"Food core temp: ≥ {standard_c:g}°C required"
        if value_c >= standard_c:
            return ComplianceVerdict(
                status=VerdictStatus.OK,
                requires_action=False,
                message=f"Food OK ({value_c:.1f}°C, ≥{standard_c:g}°C)",
                standard=standard,
            )
        return ComplianceVerdict(
            status=VerdictStatus.FAIL,
            requires_action=True,
            message=f"Food FAIL ({value_c:.1f}°C, below {standard_c:g}°C) - corrective action required",
            standard=standard,
        )

    band, label, title = _BANDS[kind]
    return _band_verdict(band, label, title, value_c)
