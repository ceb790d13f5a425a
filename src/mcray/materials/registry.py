"""Host-side helpers shared by the per-type material registries.

Each material module keeps its parameters in fixed-capacity Taichi fields
plus a 0-d counter field. These helpers validate parameters and claim the
next free slot.
"""

from collections.abc import Sequence


def check_albedo(albedo: Sequence[float]) -> tuple[float, float, float]:
    """Return albedo as a float triple.

    Raises:
        ValueError: If it does not have three components or any component
            lies outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo needs 3 components, got {len(albedo)}")
    for channel, value in zip("rgb", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo channel {channel}={value} must lie in [0, 1]")
    return float(albedo[0]), float(albedo[1]), float(albedo[2])


def claim_slot(counter, capacity: int, kind: str) -> int:
    """Reserve the next index of a registry and bump its counter.

    Raises:
        RuntimeError: If the registry already holds capacity entries.
    """
    idx = int(counter[None])
    if idx >= capacity:
        raise RuntimeError(f"{kind} material registry is full ({capacity} entries)")
    counter[None] = idx + 1
    return idx
