# physics.py
"""
The simplified tunneling model.

Tunneling probability falls off exponentially with barrier width and with
the square root of the energy deficit (barrier height minus particle energy).
Once the particle energy reaches the barrier height the deficit is clamped
to zero and the probability saturates at 1. There is no separate treatment
of above-barrier transmission.
"""
import enum
import math

from constants import SEMICONDUCTOR_BARRIER_HEIGHT, SUPERCONDUCTOR_BARRIER_HEIGHT

# --- Data Contracts ---
#
# tunneling_probability(energy_percent, barrier_height_px, barrier_width_nm) -> float:
#   - Inputs: finite numbers. Width is expected in [20, 100].
#   - Outputs: probability in (0, 1].
#   - Side Effects: None.
#   - Invariants: strictly decreasing in width while energy < height;
#     exactly 1.0 when energy >= height.


class Mode(enum.Enum):
    """Material preset selecting the barrier height."""
    SEMICONDUCTOR = "semiconductor"
    SUPERCONDUCTOR = "superconductor"


_BARRIER_HEIGHTS = {
    Mode.SEMICONDUCTOR: SEMICONDUCTOR_BARRIER_HEIGHT,
    Mode.SUPERCONDUCTOR: SUPERCONDUCTOR_BARRIER_HEIGHT,
}


def barrier_height(mode: Mode) -> int:
    """Returns the barrier height in px for a material mode."""
    return _BARRIER_HEIGHTS[mode]


def tunneling_probability(energy_percent: float, barrier_height_px: float, barrier_width_nm: float) -> float:
    """
    Computes the per-particle probability of tunneling through the barrier.

    Args:
        energy_percent (float): Particle kinetic energy, in the same units as the height.
        barrier_height_px (float): Barrier height.
        barrier_width_nm (float): Barrier width.

    Returns:
        float: exp(-2 * k * width / 10) with k = 0.1 * sqrt(max(0, height - energy)).
    """
    k = 0.1 * math.sqrt(max(0.0, barrier_height_px - energy_percent))
    return math.exp(-2 * k * barrier_width_nm / 10)


def format_probability(probability: float) -> str:
    """Formats a probability as a percentage with one decimal place."""
    return f"{probability * 100:.1f}%"
