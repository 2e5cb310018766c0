"""Appointment slot parsing and selection."""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

from loguru import logger


@dataclass(frozen=True)
class Slot:
    """A bookable appointment time returned by the slot endpoint."""

    hour: Union[int, str]
    time_display: str
    available_slot: int

    @classmethod
    def from_dict(cls, data: dict) -> "Slot":
        """
        Build a Slot from the portal's JSON representation.

        Raises:
            ValueError: If the entry has no hour or a non-integer capacity
        """
        hour = data.get("hour")
        if hour is None or hour == "":
            raise ValueError("slot entry has no hour")
        available = int(data.get("availableSlot") or 0)
        return cls(
            hour=hour,
            time_display=str(data.get("time_display") or hour),
            available_slot=max(available, 0),
        )


def parse_slots(raw: Any) -> List[Slot]:
    """
    Convert the portal's `slot_times` array into Slot records.

    Malformed entries are skipped and logged.
    """
    if not isinstance(raw, list):
        return []

    slots: List[Slot] = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping malformed slot entry: {entry!r}")
            continue
        try:
            slots.append(Slot.from_dict(entry))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed slot entry {entry!r}: {e}")
    return slots


class SlotSelector:
    """First-match slot policy: the first slot, in received order, with capacity left."""

    def select(self, slots: Iterable[Slot]) -> Optional[Slot]:
        """
        Pick a slot.

        Args:
            slots: Slots in the order the portal returned them

        Returns:
            The first slot with available_slot > 0, or None
        """
        for slot in slots:
            if slot.available_slot > 0:
                return slot
        return None


_default_selector = SlotSelector()


def select_slot(slots: Iterable[Slot]) -> Optional[Slot]:
    """Apply the default first-match policy."""
    return _default_selector.select(slots)
