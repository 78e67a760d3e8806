# simulation.py
"""
Handles the simulation control state.

This module defines the SimulationParameters snapshot and the Simulation
class, which ties the physics model to the particle system: it owns the
current parameters, the playing flag and the frame counter, and on each
tick advances the particles (only while playing) from one consistent
parameter snapshot.
"""
import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, NamedTuple, Optional

from constants import BARRIER_WIDTH_RANGE, ENERGY_RANGE
from particle import BarrierGeometry, Particle, ParticleSystem, count_outcomes
from physics import Mode, barrier_height, tunneling_probability

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, params: SimulationParameters, seed: Optional[int] = None):
#     - Side Effects: Creates the owned ParticleSystem.
#
#   - tick(self) -> Frame:
#     - Outputs: the immutable inputs the renderer needs for this frame.
#     - Side Effects: Advances the particles and the frame counter if
#       playing. A paused tick changes nothing, so its frame is static.
#     - Invariants: parameters, geometry and probability in the returned
#       Frame all derive from the same SimulationParameters object.
#       Frame.particles holds copies, so later ticks never change it.
#
#   - reset(self) -> None:
#     - Side Effects: Stops playback and empties the particle collection.


@dataclass(frozen=True)
class SimulationParameters:
    """User-controlled inputs, validated on construction."""
    mode: Mode = Mode.SEMICONDUCTOR
    barrier_width_nm: int = 50
    energy_percent: int = 60

    def __post_init__(self):
        if not isinstance(self.mode, Mode):
            raise ValueError(f"Unknown mode {self.mode!r}.")
        _check_range("barrier_width_nm", self.barrier_width_nm, BARRIER_WIDTH_RANGE)
        _check_range("energy_percent", self.energy_percent, ENERGY_RANGE)

    @classmethod
    def from_config(cls, params: Dict[str, Any]) -> "SimulationParameters":
        """Builds parameters from the `simulation_parameters` config section."""
        mode_name = params.get('mode', Mode.SEMICONDUCTOR.value)
        try:
            mode = Mode(str(mode_name).lower())
        except ValueError:
            raise ValueError(f"Unknown mode {mode_name!r} in configuration.") from None
        return cls(
            mode=mode,
            barrier_width_nm=params.get('barrier_width_nm', 50),
            energy_percent=params.get('energy_percent', 60),
        )

    def with_changes(self, **changes) -> "SimulationParameters":
        """Returns a new validated snapshot with some fields replaced."""
        return replace(self, **changes)

    @property
    def barrier_height(self) -> int:
        return barrier_height(self.mode)

    def geometry(self) -> BarrierGeometry:
        return BarrierGeometry(height=self.barrier_height, width=self.barrier_width_nm)

    def tunneling_probability(self) -> float:
        return tunneling_probability(self.energy_percent, self.barrier_height, self.barrier_width_nm)


def _check_range(name: str, value: Any, bounds) -> None:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}.")
    if not low <= value <= high:
        raise ValueError(f"{name}={value} is outside the valid range [{low}, {high}].")


def clamp(value: int, bounds) -> int:
    low, high = bounds
    return max(low, min(high, int(value)))


class Frame(NamedTuple):
    """Read-only render inputs for one tick."""
    params: SimulationParameters
    geometry: BarrierGeometry
    probability: float
    frame_counter: int
    particles: tuple


class Simulation:
    """
    Drives the particle system from the current parameter snapshot.
    """
    def __init__(self, params: Optional[SimulationParameters] = None, seed: Optional[int] = None):
        """
        Initializes the simulation in the paused state.

        Args:
            params (Optional[SimulationParameters]): Starting parameters.
            seed (Optional[int]): Master seed for the particle system.
        """
        self.params = params if params is not None else SimulationParameters()
        self.particle_system = ParticleSystem(seed)
        self.playing = False
        self.frame_counter = 0
        self.step_count = 0
        # One lock covers the read-decide-write sequence of a tick, resets
        # and parameter edits.
        self._lock = threading.Lock()

        logging.info(f"Simulation initialized with {self.params}.")

    @property
    def particles(self) -> List[Particle]:
        return self.particle_system.particles

    # --- Parameter edits ---

    def set_mode(self, mode: Mode) -> None:
        self._update(mode=mode)

    def toggle_mode(self) -> None:
        if self.params.mode is Mode.SEMICONDUCTOR:
            self.set_mode(Mode.SUPERCONDUCTOR)
        else:
            self.set_mode(Mode.SEMICONDUCTOR)

    def set_barrier_width(self, width_nm: int) -> None:
        """Sets the barrier width, clamped into the slider range."""
        self._update(barrier_width_nm=clamp(width_nm, BARRIER_WIDTH_RANGE))

    def set_energy(self, energy_percent: int) -> None:
        """Sets the particle energy, clamped into the slider range."""
        self._update(energy_percent=clamp(energy_percent, ENERGY_RANGE))

    def _update(self, **changes) -> None:
        with self._lock:
            old = self.params
            self.params = old.with_changes(**changes)
        if self.params != old:
            logging.info(
                f"Parameters changed: {old} -> {self.params}. "
                f"Tunneling probability now {self.params.tunneling_probability():.6f}."
            )

    # --- Playback ---

    def play(self) -> None:
        self.playing = True
        logging.info("Playback started.")

    def pause(self) -> None:
        self.playing = False
        logging.info("Playback paused.")

    def toggle_playing(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        """Stops playback and clears every particle."""
        with self._lock:
            self.playing = False
            self.particle_system.clear()
        logging.info("Simulation reset.")

    def tick(self) -> Frame:
        """
        Executes one frame: advance the particles if playing, then hand back
        everything the renderer needs.
        """
        with self._lock:
            params = self.params
            geometry = params.geometry()
            probability = params.tunneling_probability()
            if self.playing:
                self.particle_system.advance(geometry, probability)
                self.step_count += 1
                self.frame_counter += 1
            snapshot = tuple(replace(p) for p in self.particles)
            frame = Frame(params, geometry, probability, self.frame_counter, snapshot)
        return frame

    def outcome_counts(self):
        return count_outcomes(self.particles)
