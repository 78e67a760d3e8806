# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the Particle record, the BarrierGeometry it moves
against, and the ParticleSystem class, which owns the particle collection
and advances it by one tick: moving each particle, committing its
tunnel/reflect decision exactly once, discarding particles that left the
canvas and spawning new ones.
"""
import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

import numpy as np

from constants import (
    APPROACH_STEP, BARRIER_X, CANVAS_HEIGHT, CANVAS_WIDTH, CENTER_Y,
    CROSSING_STEP, MAX_PARTICLES, MIN_X, REFLECTION_STEP, SPAWN_PROBABILITY,
    SPAWN_X, SPAWN_Y_SPREAD, TRANSMITTED_STEP
)

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, seed: Optional[int] = None):
#     - Inputs:
#       - seed: master seed for every random draw, or None for entropy.
#     - Side Effects: Creates an empty, owned particle list.
#
#   - advance(self, geometry: BarrierGeometry, probability: float) -> List[Particle]:
#     - Inputs:
#       - geometry: barrier bounds for this tick.
#       - probability: tunneling probability for this tick, in (0, 1].
#     - Outputs: the same list object, updated in place.
#     - Invariants:
#       - A particle's `decided` flag flips false -> true at most once.
#       - `tunneled` and `reflected` are never both True.
#       - len(particles) <= MAX_PARTICLES after every call.
#       - Every particle satisfies MIN_X < x < CANVAS_WIDTH after the filter
#         (a freshly spawned particle sits at SPAWN_X).


@dataclass
class Particle:
    """A single electron. Only the engine mutates it."""
    x: float
    y: float
    decided: bool = False
    tunneled: bool = False
    reflected: bool = False


@dataclass(frozen=True)
class BarrierGeometry:
    """Position and size of the potential barrier on the canvas."""
    height: int
    width: int
    x: int = BARRIER_X
    canvas_width: int = CANVAS_WIDTH
    canvas_height: int = CANVAS_HEIGHT
    center_y: int = CENTER_Y

    @property
    def left(self) -> int:
        return self.x

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def top(self) -> int:
        return self.center_y - self.height

    @property
    def bottom(self) -> int:
        return self.center_y + self.height


class OutcomeCounts(NamedTuple):
    approaching: int
    tunneled: int
    reflected: int


def transition(particle: Particle, geometry: BarrierGeometry, probability: float, rng: np.random.Generator) -> None:
    """
    Applies one tick of motion to a particle, in place.

    The decision is drawn on the first tick the particle lies inside
    [left, right). A reflected particle retreats by 3 every tick from then
    on, so it never reaches the far side and leaves through the left edge.
    """
    if particle.x < geometry.left:
        particle.x += REFLECTION_STEP if particle.reflected else APPROACH_STEP
    elif particle.x < geometry.right:
        if not particle.decided:
            particle.tunneled = bool(rng.random() < probability)
            particle.decided = True
            particle.x += CROSSING_STEP
        elif particle.tunneled:
            particle.x += CROSSING_STEP
        else:
            particle.x += REFLECTION_STEP
            particle.reflected = True
    elif particle.tunneled:
        particle.x += TRANSMITTED_STEP
    # An untunneled particle past the barrier is terminal; leave it.


def count_outcomes(particles: List[Particle]) -> OutcomeCounts:
    """Tallies particles by their current outcome."""
    tunneled = sum(1 for p in particles if p.tunneled)
    reflected = sum(1 for p in particles if p.reflected)
    return OutcomeCounts(len(particles) - tunneled - reflected, tunneled, reflected)


class ParticleSystem:
    """
    A container for all particles, owning the collection and its randomness.
    """
    def __init__(self, seed: Optional[int] = None):
        """
        Initializes an empty particle system.

        Args:
            seed (Optional[int]): Seed for the spawn and decision draws.
        """
        self.seed = seed
        # Rule 12: All randomness is controlled by a single master seed.
        self.rng = np.random.default_rng(seed)
        self.particles: List[Particle] = []

        logging.info(f"ParticleSystem initialized (seed={seed}, max {MAX_PARTICLES} particles).")

    def __len__(self) -> int:
        return len(self.particles)

    def spawn(self) -> Particle:
        """Appends a new undecided particle at the spawn point and returns it."""
        y = CENTER_Y + self.rng.uniform(-SPAWN_Y_SPREAD, SPAWN_Y_SPREAD)
        particle = Particle(x=SPAWN_X, y=float(y))
        self.particles.append(particle)
        return particle

    def advance(self, geometry: BarrierGeometry, probability: float) -> List[Particle]:
        """
        Executes one tick of the particle state machine.
        """
        for particle in self.particles:
            transition(particle, geometry, probability, self.rng)

        # Slice assignment keeps the list object the caller holds.
        self.particles[:] = [p for p in self.particles if MIN_X < p.x < CANVAS_WIDTH]

        if self.rng.random() < SPAWN_PROBABILITY and len(self.particles) < MAX_PARTICLES:
            self.spawn()

        return self.particles

    def clear(self) -> None:
        """Removes every particle."""
        self.particles.clear()
        logging.debug("Particle collection cleared.")
