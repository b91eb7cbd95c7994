"""
Shared validators for catalog and branch input.

All validators raise ValueError with a staff-facing message; services turn
that into ValidationError with the offending field attached.
"""

import math
import re
from typing import Optional

from shared.config.constants import ItemType, Limits, WeekDay

# "08:00-14:00" style activity slot
TIME_SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d-([01]\d|2[0-3]):[0-5]\d$")


def validate_name(name: Optional[str], max_length: int = Limits.MAX_NAME_LENGTH) -> str:
    """
    Validate and normalize a display name.

    Returns:
        The stripped name

    Raises:
        ValueError: If the name is missing, blank or too long
    """
    if name is None:
        raise ValueError("El nombre es obligatorio")

    if not isinstance(name, str):
        raise ValueError("El nombre debe ser texto")
    name = name.strip()
    if not name:
        raise ValueError("El nombre no puede estar vacío")
    if len(name) > max_length:
        raise ValueError(f"El nombre es demasiado largo (máximo {max_length} caracteres)")
    return name


def validate_price(price: Optional[float], allow_none: bool = False) -> Optional[float]:
    """
    Validate a price in currency units.

    0.0 is a legitimate price (free item); None is only accepted when
    allow_none is set, and is returned unchanged.

    Raises:
        ValueError: If price is negative, not finite, or above Limits.MAX_PRICE
    """
    if price is None:
        if allow_none:
            return None
        raise ValueError("El precio es obligatorio")

    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValueError("El precio debe ser numérico")
    price = float(price)
    if not math.isfinite(price):
        raise ValueError("El precio debe ser un número finito")
    if price < 0:
        raise ValueError("El precio no puede ser negativo")
    if price > Limits.MAX_PRICE:
        raise ValueError(f"El precio máximo es {Limits.MAX_PRICE:.2f}")
    return price


def normalize_week_day(day: str) -> str:
    """
    Normalize a week-day name to its upper-case key.

    Raises:
        ValueError: If day is not one of the seven week days
    """
    day_uc = day.strip().upper() if isinstance(day, str) else ""
    if day_uc not in WeekDay.ALL:
        allowed = ", ".join(WeekDay.ALL)
        raise ValueError(f"Día inválido '{day}'. Permitidos: {allowed}")
    return day_uc


def validate_time_slot(slot: str) -> str:
    """
    Validate an activity slot such as "08:00-14:00".

    Raises:
        ValueError: If the slot is malformed or ends before it starts
    """
    if not isinstance(slot, str):
        raise ValueError(f"Horario inválido {slot!r}. Formato esperado: HH:MM-HH:MM")
    slot = slot.strip()
    if not TIME_SLOT_PATTERN.match(slot):
        raise ValueError(f"Horario inválido '{slot}'. Formato esperado: HH:MM-HH:MM")

    start, end = slot.split("-")
    if end <= start:
        raise ValueError(f"Horario inválido '{slot}': el cierre debe ser posterior a la apertura")
    return slot


def dedupe_ids(ids: list[int]) -> list[int]:
    """Drop repeated IDs, keeping the first occurrence (order is significant)."""
    return list(dict.fromkeys(int(i) for i in ids))


def validate_description(description: Optional[str]) -> str:
    """None becomes an empty description."""
    if description is None:
        return ""
    if not isinstance(description, str):
        raise ValueError("La descripción debe ser texto")
    description = description.strip()
    if len(description) > Limits.MAX_DESCRIPTION_LENGTH:
        raise ValueError(
            f"La descripción es demasiado larga (máximo {Limits.MAX_DESCRIPTION_LENGTH} caracteres)"
        )
    return description


def validate_optional_text(value: Optional[str], field_label: str) -> Optional[str]:
    """Strip free text; blank becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_label} debe ser texto")
    value = value.strip()
    if len(value) > Limits.MAX_NAME_LENGTH:
        raise ValueError(f"{field_label} es demasiado largo (máximo {Limits.MAX_NAME_LENGTH} caracteres)")
    return value or None


def validate_string_list(values: Optional[list[str]], field_label: str, max_items: int = Limits.MAX_TAGS) -> list[str]:
    """
    Normalize a list of short labels (tags, accessibility features).

    Blank entries are dropped and repeats removed, keeping first occurrence.
    """
    if values is None:
        return []
    if isinstance(values, str) or not isinstance(values, (list, tuple)):
        raise ValueError(f"{field_label} debe ser una lista")

    cleaned: list[str] = []
    for value in values:
        if not isinstance(value, str):
            raise ValueError(f"{field_label} solo admite texto")
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)

    if len(cleaned) > max_items:
        raise ValueError(f"{field_label}: máximo {max_items} elementos")
    return cleaned


def parse_item_type(value: object) -> ItemType:
    """
    Raises:
        ValueError: If value is not a known item type
    """
    try:
        return ItemType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ItemType)
        raise ValueError(f"Tipo inválido '{value}'. Permitidos: {allowed}") from None


def validate_id_list(ids: Optional[list[int]], field_label: str) -> list[int]:
    """Validate an ordered list of positive IDs and drop repeats."""
    if ids is None:
        return []
    if isinstance(ids, (str, bytes)) or not isinstance(ids, (list, tuple)):
        raise ValueError(f"{field_label} debe ser una lista de IDs")
    for value in ids:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"{field_label} contiene un ID inválido: {value!r}")
    return dedupe_ids(list(ids))


def validate_activity_times(times: Optional[dict[str, list[str]]]) -> dict[str, list[str]]:
    """Normalize a week schedule: upper-case day keys, valid unique slots."""
    if times is None:
        return {}
    if not isinstance(times, dict):
        raise ValueError("Los horarios deben ser un diccionario día -> franjas")

    normalized: dict[str, list[str]] = {}
    for day, slots in times.items():
        day_uc = normalize_week_day(day)
        if isinstance(slots, str) or not isinstance(slots, (list, tuple)):
            raise ValueError(f"Las franjas de {day_uc} deben ser una lista")
        merged = normalized.setdefault(day_uc, [])
        for slot in slots:
            slot = validate_time_slot(slot)
            if slot not in merged:
                merged.append(slot)
    return {day: slots for day, slots in normalized.items() if slots}
