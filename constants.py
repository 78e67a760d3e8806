# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They fix the canvas geometry, the particle kinematics and the colour
palette. Anything a user may tune (barrier width, energy, mode, seed)
lives in config.json instead.
"""

# --- Canvas Geometry ---
# Logical drawing units. The simulation canvas is always 800x400.
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 400
CENTER_Y = CANVAS_HEIGHT // 2
BARRIER_X = 300

# Barrier heights (px) for each material preset.
SEMICONDUCTOR_BARRIER_HEIGHT = 120
SUPERCONDUCTOR_BARRIER_HEIGHT = 80

# Valid slider ranges, inclusive.
BARRIER_WIDTH_RANGE = (20, 100)
ENERGY_RANGE = (20, 100)

# --- Particle Kinematics ---
SPAWN_X = 20
SPAWN_Y_SPREAD = 30          # y = CENTER_Y +/- this
SPAWN_PROBABILITY = 0.03     # per tick
MAX_PARTICLES = 20
APPROACH_STEP = 2
CROSSING_STEP = 1
REFLECTION_STEP = -3
TRANSMITTED_STEP = 2
# Particles are discarded once x <= MIN_X or x >= CANVAS_WIDTH.
MIN_X = -50

# --- Window / Timing ---
UI_PANEL_WIDTH = 300
TICK_MS = 50

# --- Wave Function Drawing ---
WAVE_AMPLITUDE = 30
WAVE_NUMBER = 0.05
WAVE_PHASE_SPEED = 2         # px of phase shift per frame
BARRIER_DECAY_RATE = 3       # amplitude falls to exp(-3) across the barrier

# --- Particle Glyphs ---
PARTICLE_RADIUS = 8
PARTICLE_RING_RADIUS = 10
PARTICLE_EDGE_ALPHA = 0.2

# --- Colour Palette (RGB) ---
BACKGROUND_COLOR = (15, 23, 42)        # slate-900
GRID_COLOR = (51, 65, 85)              # slate-700
GRID_DASH = 5
LABEL_COLOR = (226, 232, 240)          # slate-200
PROBABILITY_TEXT_COLOR = (251, 191, 36)  # amber-400

SEMICONDUCTOR_COLOR = (239, 68, 68)    # red-500
SUPERCONDUCTOR_COLOR = (139, 92, 246)  # violet-500
# Alpha of the barrier gradient at its left edge, middle and right edge.
BARRIER_GRADIENT_ALPHAS = (0.6, 0.8, 0.6)

INCIDENT_WAVE_COLOR = (96, 165, 250)   # blue-400
BARRIER_WAVE_COLOR = (245, 158, 11)    # amber-500
TRANSMITTED_WAVE_COLOR = (16, 185, 129)  # emerald-500

TUNNELED_PARTICLE_COLOR = (16, 185, 129)
INCIDENT_PARTICLE_COLOR = (59, 130, 246)
