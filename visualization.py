# visualization.py
"""
Handles the visualization of the tunneling simulation using Pygame.

The Renderer draws one frame of the simulation canvas onto any pygame
Surface and has no knowledge of windows or events. The Visualizer owns
the display window, the control panel and event handling, and uses a
Renderer for the canvas area.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pygame

from constants import (
    BACKGROUND_COLOR, BARRIER_DECAY_RATE, BARRIER_GRADIENT_ALPHAS,
    BARRIER_WAVE_COLOR, BARRIER_WIDTH_RANGE, CANVAS_HEIGHT, CANVAS_WIDTH,
    ENERGY_RANGE, GRID_COLOR, GRID_DASH, INCIDENT_PARTICLE_COLOR,
    INCIDENT_WAVE_COLOR, LABEL_COLOR, PARTICLE_EDGE_ALPHA, PARTICLE_RADIUS,
    PARTICLE_RING_RADIUS, PROBABILITY_TEXT_COLOR, SEMICONDUCTOR_COLOR,
    SUPERCONDUCTOR_COLOR, TRANSMITTED_WAVE_COLOR, TUNNELED_PARTICLE_COLOR,
    UI_PANEL_WIDTH, WAVE_AMPLITUDE, WAVE_NUMBER, WAVE_PHASE_SPEED
)
from particle import BarrierGeometry, Particle
from physics import Mode, format_probability

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Simulation


# --- Data Contracts ---
#
# class Renderer:
#   - render(self, surface, mode, geometry, probability, frame_counter, particles) -> None:
#     - Inputs:
#       - surface: pygame.Surface at least CANVAS_WIDTH x CANVAS_HEIGHT.
#       - mode: Mode, selects the barrier hue.
#       - geometry: BarrierGeometry for this frame.
#       - probability: tunneling probability in (0, 1].
#       - frame_counter: int, drives the wave phase.
#       - particles: read-only sequence of Particle.
#     - Side Effects: Overwrites the canvas area of `surface`.
#     - Invariants: Never mutates `particles`.
#
# class Visualizer:
#   - draw(self, simulation: "Simulation") -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Handles events (which may edit the simulation's
#       parameters, playback state or reset it), ticks the simulation once,
#       renders the canvas and panel, flips the display.

GRID_LINE_COUNT = 5
GRID_TOP = 100
GRID_SPACING = 60


def barrier_color(mode: Mode) -> Tuple[int, int, int]:
    return SUPERCONDUCTOR_COLOR if mode is Mode.SUPERCONDUCTOR else SEMICONDUCTOR_COLOR


def wave_phase(xs: np.ndarray, frame_counter: int) -> np.ndarray:
    return (xs - frame_counter * WAVE_PHASE_SPEED) * WAVE_NUMBER


def transmitted_stroke_width(probability: float) -> float:
    """Stroke width of the transmitted wave, proportional to its amplitude."""
    return 2 * np.sqrt(probability)


def wave_function_segments(
    geometry: BarrierGeometry, probability: float, frame_counter: int
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """
    Samples the incident, in-barrier and transmitted wave at every integer x.

    Returns:
        list: Three (xs, ys) array pairs. The in-barrier pair is empty when
        the barrier has no width.
    """
    center = geometry.center_y

    xs_a = np.arange(0, geometry.left, dtype=np.float64)
    ys_a = center + WAVE_AMPLITUDE * np.sin(wave_phase(xs_a, frame_counter))

    if geometry.width > 0:
        xs_b = np.arange(geometry.left, geometry.right, dtype=np.float64)
        decay = np.exp(-BARRIER_DECAY_RATE * (xs_b - geometry.left) / geometry.width)
        ys_b = center + WAVE_AMPLITUDE * decay * np.sin(wave_phase(xs_b, frame_counter))
    else:
        xs_b = ys_b = np.empty(0)

    xs_c = np.arange(geometry.right, geometry.canvas_width, dtype=np.float64)
    ys_c = center + WAVE_AMPLITUDE * np.sqrt(probability) * np.sin(wave_phase(xs_c, frame_counter))

    return [(xs_a, ys_a), (xs_b, ys_b), (xs_c, ys_c)]


def _load_font(size: int, bold: bool = False) -> pygame.font.Font:
    # Pygame falls back to its bundled font if none of these are installed.
    try:
        return pygame.font.SysFont("dejavusans,arial,helvetica", size, bold=bold)
    except pygame.error:
        logging.warning("System fonts unavailable, using the pygame default font.")
        return pygame.font.Font(None, size)


class Renderer:
    """
    Draws the simulation canvas: barrier, wave function, particles and labels.
    """
    def __init__(self):
        pygame.font.init()
        self.font_label = _load_font(14)
        self.font_probability = _load_font(16)

        # --- Pre-render Glyphs for Performance (Rule 11) ---
        self.glyphs = {
            True: self._pre_render_glyph(TUNNELED_PARTICLE_COLOR),
            False: self._pre_render_glyph(INCIDENT_PARTICLE_COLOR),
        }
        self._gradient_cache: Dict[Tuple, pygame.Surface] = {}

        logging.debug("Renderer initialized.")

    def render(
        self,
        surface: pygame.Surface,
        mode: Mode,
        geometry: BarrierGeometry,
        probability: float,
        frame_counter: int,
        particles: Sequence[Particle],
    ) -> None:
        """Draws one complete frame. Later steps occlude earlier ones."""
        surface.fill(BACKGROUND_COLOR, pygame.Rect(0, 0, geometry.canvas_width, geometry.canvas_height))
        self._draw_grid(surface, geometry)
        self._draw_barrier(surface, mode, geometry)
        self._draw_wave_function(surface, geometry, probability, frame_counter)
        for particle in particles:
            self._draw_particle(surface, particle)
        self._draw_labels(surface, geometry, probability)

    def _draw_grid(self, surface: pygame.Surface, geometry: BarrierGeometry):
        """Dashed reference lines, GRID_DASH px on and GRID_DASH px off."""
        for i in range(GRID_LINE_COUNT):
            y = GRID_TOP + i * GRID_SPACING
            for x in range(0, geometry.canvas_width, 2 * GRID_DASH):
                end = min(x + GRID_DASH, geometry.canvas_width) - 1
                pygame.draw.line(surface, GRID_COLOR, (x, y), (end, y), 1)

    def _draw_barrier(self, surface: pygame.Surface, mode: Mode, geometry: BarrierGeometry):
        if geometry.width <= 0:
            return
        color = barrier_color(mode)
        rect = pygame.Rect(geometry.left, geometry.top, geometry.width, 2 * geometry.height)
        surface.blit(self._barrier_gradient(color, rect.width, rect.height), rect.topleft)
        pygame.draw.rect(surface, color, rect, 2)

    def _barrier_gradient(self, color: Tuple[int, int, int], width: int, height: int) -> pygame.Surface:
        """
        Returns a horizontal gradient with three alpha stops, cached by size.
        """
        key = (color, width, height)
        cached = self._gradient_cache.get(key)
        if cached is not None:
            return cached

        gradient = pygame.Surface((width, height), pygame.SRCALPHA)
        alphas = np.interp(np.linspace(0.0, 1.0, width), [0.0, 0.5, 1.0], BARRIER_GRADIENT_ALPHAS)
        for column, alpha in enumerate(alphas):
            pygame.draw.line(gradient, (*color, int(round(alpha * 255))), (column, 0), (column, height - 1))

        self._gradient_cache[key] = gradient
        logging.debug(f"Built barrier gradient {width}x{height} for colour {color}.")
        return gradient

    def _draw_wave_function(
        self, surface: pygame.Surface, geometry: BarrierGeometry, probability: float, frame_counter: int
    ):
        transmitted_width = max(1, int(round(transmitted_stroke_width(probability))))
        strokes = zip(
            wave_function_segments(geometry, probability, frame_counter),
            (INCIDENT_WAVE_COLOR, BARRIER_WAVE_COLOR, TRANSMITTED_WAVE_COLOR),
            (2, 2, transmitted_width),
        )
        for (xs, ys), color, width in strokes:
            if len(xs) < 2:
                continue
            points = np.column_stack((xs, ys)).tolist()
            pygame.draw.lines(surface, color, False, points, width)

    def _draw_particle(self, surface: pygame.Surface, particle: Particle):
        color = TUNNELED_PARTICLE_COLOR if particle.tunneled else INCIDENT_PARTICLE_COLOR
        center = (int(round(particle.x)), int(round(particle.y)))
        surface.blit(self.glyphs[particle.tunneled], (center[0] - PARTICLE_RADIUS, center[1] - PARTICLE_RADIUS))
        pygame.draw.circle(surface, color, center, PARTICLE_RING_RADIUS, 2)

    def _draw_labels(self, surface: pygame.Surface, geometry: BarrierGeometry, probability: float):
        self._draw_text(surface, "Incident Electrons", self.font_label, LABEL_COLOR, 50, 30)
        self._draw_text(
            surface, "Potential Barrier", self.font_label, LABEL_COLOR,
            geometry.left + geometry.width / 2 - 50, 30
        )
        self._draw_text(surface, "Transmitted", self.font_label, LABEL_COLOR, geometry.canvas_width - 120, 30)
        self._draw_text(
            surface, f"Tunneling Probability: {format_probability(probability)}",
            self.font_probability, PROBABILITY_TEXT_COLOR, 20, geometry.canvas_height - 20
        )

    @staticmethod
    def _draw_text(surface, text, font, color, x, baseline):
        """Left-aligned text whose baseline sits at `baseline`."""
        text_surf = font.render(text, True, color)
        surface.blit(text_surf, (int(x), int(baseline - font.get_ascent())))

    def _pre_render_glyph(self, color: Tuple[int, int, int]) -> pygame.Surface:
        """
        Pre-renders a radial-gradient disk, opaque at the centre and fading
        to PARTICLE_EDGE_ALPHA at the rim.
        """
        diameter = PARTICLE_RADIUS * 2 + 1
        glyph = pygame.Surface((diameter, diameter), pygame.SRCALPHA)
        inner = pygame.Color(*color, 255)
        outer = pygame.Color(*color, int(round(PARTICLE_EDGE_ALPHA * 255)))
        # Outermost first so each smaller circle overwrites the one beneath.
        for radius in range(PARTICLE_RADIUS, 0, -1):
            t = (radius - 1) / (PARTICLE_RADIUS - 1)
            pygame.draw.circle(glyph, inner.lerp(outer, t), (PARTICLE_RADIUS, PARTICLE_RADIUS), radius)
        return glyph


class Slider:
    """An integer slider edited by dragging or by scrolling while hovered."""
    def __init__(self, x: int, y: int, w: int, bounds: Tuple[int, int], label: str, unit: str = ""):
        self.rect = pygame.Rect(x, y, w, 4)
        self.min, self.max = bounds
        self.label = label
        self.unit = unit
        self.dragging = False

    def hit_rect(self) -> pygame.Rect:
        return pygame.Rect(self.rect.x - 8, self.rect.y - 8, self.rect.width + 16, self.rect.height + 16)

    def wheel_rect(self) -> pygame.Rect:
        """The track plus its label, which sits 20 px above it."""
        return pygame.Rect(self.rect.x - 8, self.rect.y - 22, self.rect.width + 16, self.rect.height + 30)

    def value_at(self, px: int) -> int:
        rel = max(0, min(px - self.rect.x, self.rect.width))
        return int(round(self.min + (rel / self.rect.width) * (self.max - self.min)))

    def draw(self, screen, value: int, font, track_color, accent_color):
        pygame.draw.rect(screen, track_color, self.rect, border_radius=2)
        t = (value - self.min) / (self.max - self.min)
        filled = pygame.Rect(self.rect.x, self.rect.y, int(t * self.rect.width), 4)
        pygame.draw.rect(screen, accent_color, filled, border_radius=2)
        pygame.draw.circle(screen, accent_color, (self.rect.x + int(t * self.rect.width), self.rect.centery), 7)

        label_surf = font.render(f"{self.label}: {value}{self.unit}", True, (200, 200, 200))
        screen.blit(label_surf, (self.rect.x, self.rect.y - 20))

    def handle(self, event, value: int, mouse_pos: Tuple[int, int]) -> Optional[int]:
        """Returns the new value if the event changed it, else None."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.hit_rect().collidepoint(event.pos):
                self.dragging = True
                return self.value_at(event.pos[0])
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION and self.dragging:
            return self.value_at(event.pos[0])
        elif event.type == pygame.MOUSEWHEEL and self.wheel_rect().collidepoint(mouse_pos):
            # event.y is 1 for scroll up, -1 for scroll down
            return max(self.min, min(self.max, value + event.y))
        return None


class Visualizer:
    """
    Owns the display window, the control panel and user input.
    """
    def __init__(self, fullscreen: bool = False):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        if fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode((CANVAS_WIDTH + UI_PANEL_WIDTH, CANVAS_HEIGHT))
        width, height = self.screen.get_size()

        # The canvas is a fixed-size subsurface in the top-left corner.
        self.canvas = self.screen.subsurface(pygame.Rect(0, 0, CANVAS_WIDTH, CANVAS_HEIGHT))
        self.renderer = Renderer()

        self.ui_panel_surface = pygame.Surface((UI_PANEL_WIDTH, height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((30, 41, 59, 255))  # slate-800

        pygame.display.set_caption("Quantum Tunneling Visualization")

        self.font_title = _load_font(16, bold=True)
        self.font_main = _load_font(13)
        self.font_small = _load_font(12)

        # --- UI Layout ---
        panel_x = CANVAS_WIDTH + 20
        panel_w = UI_PANEL_WIDTH - 40
        half_w = (panel_w - 8) // 2
        self.semiconductor_button_rect = pygame.Rect(panel_x, 78, half_w, 28)
        self.superconductor_button_rect = pygame.Rect(panel_x + half_w + 8, 78, half_w, 28)
        self.width_slider = Slider(panel_x, 140, panel_w, BARRIER_WIDTH_RANGE, "Barrier Width", "nm")
        self.energy_slider = Slider(panel_x, 185, panel_w, ENERGY_RANGE, "Electron Energy", "%")
        self.play_button_rect = pygame.Rect(panel_x, 205, panel_w - 90, 28)
        self.reset_button_rect = pygame.Rect(panel_x + panel_w - 82, 205, 82, 28)
        self.panel_x = panel_x
        self.panel_w = panel_w

        # --- UI Color Palette ---
        self.button_color = (51, 65, 85)
        self.button_hover_color = (71, 85, 105)
        self.play_button_color = (37, 99, 235)
        self.play_button_hover_color = (29, 78, 216)
        self.mode_active_colors = {
            Mode.SEMICONDUCTOR: (220, 38, 38),
            Mode.SUPERCONDUCTOR: (147, 51, 234),
        }
        self.text_color_title = (255, 255, 255)
        self.text_color_dim = (148, 163, 184)
        self.slider_track_color = (51, 65, 85)
        self.slider_accent_color = (96, 165, 250)

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def handle_events(self, simulation: "Simulation") -> bool:
        """
        Applies pending input to the simulation.

        Returns:
            bool: False if the user asked to quit.
        """
        mouse_pos = pygame.mouse.get_pos()
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                self._handle_key(event.key, simulation)

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if self.semiconductor_button_rect.collidepoint(event.pos):
                    simulation.set_mode(Mode.SEMICONDUCTOR)
                elif self.superconductor_button_rect.collidepoint(event.pos):
                    simulation.set_mode(Mode.SUPERCONDUCTOR)
                elif self.play_button_rect.collidepoint(event.pos):
                    simulation.toggle_playing()
                elif self.reset_button_rect.collidepoint(event.pos):
                    simulation.reset()

            self._dispatch_to_sliders(event, simulation, mouse_pos)
        return True

    def _dispatch_to_sliders(self, event, simulation: "Simulation", mouse_pos) -> None:
        """Hands the event to each slider until one of them claims it."""
        params = simulation.params
        new_width = self.width_slider.handle(event, params.barrier_width_nm, mouse_pos)
        if new_width is not None:
            simulation.set_barrier_width(new_width)
            return
        new_energy = self.energy_slider.handle(event, params.energy_percent, mouse_pos)
        if new_energy is not None:
            simulation.set_energy(new_energy)

    @staticmethod
    def _handle_key(key: int, simulation: "Simulation"):
        params = simulation.params
        if key == pygame.K_SPACE:
            simulation.toggle_playing()
        elif key == pygame.K_r:
            simulation.reset()
        elif key == pygame.K_m:
            simulation.toggle_mode()
        elif key == pygame.K_LEFT:
            simulation.set_barrier_width(params.barrier_width_nm - 1)
        elif key == pygame.K_RIGHT:
            simulation.set_barrier_width(params.barrier_width_nm + 1)
        elif key == pygame.K_DOWN:
            simulation.set_energy(params.energy_percent - 1)
        elif key == pygame.K_UP:
            simulation.set_energy(params.energy_percent + 1)

    def draw(self, simulation: "Simulation") -> bool:
        """
        Handles input, ticks the simulation once and draws the frame.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        if not self.handle_events(simulation):
            return False

        frame = simulation.tick()

        # 1. Canvas
        self.renderer.render(
            self.canvas, frame.params.mode, frame.geometry, frame.probability,
            frame.frame_counter, frame.particles
        )

        # 2. Panel background and controls on top
        mouse_pos = pygame.mouse.get_pos()
        self.screen.blit(self.ui_panel_surface, (CANVAS_WIDTH, 0))
        self._draw_header(frame.params.mode)
        self._draw_mode_buttons(frame.params.mode, mouse_pos)
        self.width_slider.draw(
            self.screen, frame.params.barrier_width_nm, self.font_main,
            self.slider_track_color, self.slider_accent_color
        )
        self.energy_slider.draw(
            self.screen, frame.params.energy_percent, self.font_main,
            self.slider_track_color, self.slider_accent_color
        )
        self._draw_playback_buttons(simulation.playing, mouse_pos)
        self._draw_statistics(simulation)
        self._draw_legend()

        pygame.display.flip()
        return True

    def _draw_header(self, mode: Mode):
        title = self.font_title.render("Quantum Tunneling Visualization", True, self.text_color_title)
        self.screen.blit(title, (self.panel_x, 12))
        material = "superconductors" if mode is Mode.SUPERCONDUCTOR else "semiconductors"
        lines = self._render_text_wrapped(
            f"Electron tunneling through potential barriers in {material}",
            self.font_small, self.panel_w, self.text_color_dim
        )
        y = 36
        for surf in lines:
            self.screen.blit(surf, (self.panel_x, y))
            y += self.font_small.get_linesize()

    def _draw_button(self, rect: pygame.Rect, label: str, color, hover_color, mouse_pos):
        fill = hover_color if rect.collidepoint(mouse_pos) else color
        pygame.draw.rect(self.screen, fill, rect, border_radius=5)
        text_surf = self.font_main.render(label, True, self.text_color_title)
        self.screen.blit(text_surf, text_surf.get_rect(center=rect.center))

    def _draw_mode_buttons(self, mode: Mode, mouse_pos):
        for button_mode, rect, label in (
            (Mode.SEMICONDUCTOR, self.semiconductor_button_rect, "Semiconductor"),
            (Mode.SUPERCONDUCTOR, self.superconductor_button_rect, "Superconductor"),
        ):
            if button_mode is mode:
                active = self.mode_active_colors[button_mode]
                self._draw_button(rect, label, active, active, mouse_pos)
            else:
                self._draw_button(rect, label, self.button_color, self.button_hover_color, mouse_pos)

    def _draw_playback_buttons(self, playing: bool, mouse_pos):
        self._draw_button(
            self.play_button_rect, "Pause" if playing else "Play",
            self.play_button_color, self.play_button_hover_color, mouse_pos
        )
        self._draw_button(self.reset_button_rect, "Reset", self.button_color, self.button_hover_color, mouse_pos)

    def _draw_statistics(self, simulation: "Simulation"):
        counts = simulation.outcome_counts()
        text = f"Tunneled: {counts.tunneled}   Reflected: {counts.reflected}   In flight: {counts.approaching}"
        surf = self.font_small.render(text, True, self.text_color_dim)
        self.screen.blit(surf, (self.panel_x, 246))

    def _draw_legend(self):
        heading = self.font_main.render("How It Works:", True, self.text_color_title)
        self.screen.blit(heading, (self.panel_x, 272))
        entries = [
            ("Blue: incident electrons", INCIDENT_PARTICLE_COLOR),
            ("Green: tunneled through the barrier", TUNNELED_PARTICLE_COLOR),
            ("Wave decays inside the barrier", BARRIER_WAVE_COLOR),
            ("Superconductors have lower barriers", SUPERCONDUCTOR_COLOR),
            ("Probability falls exponentially", self.text_color_dim),
        ]
        y = 294
        for text, color in entries:
            surf = self.font_small.render(text, True, color)
            self.screen.blit(surf, (self.panel_x, y))
            y += self.font_small.get_linesize() + 2

    def _render_text_wrapped(
        self, text: str, font: pygame.font.Font, max_width: int, color: tuple
    ) -> list:
        """
        Renders text, wrapping it to a new line if it exceeds max_width.
        Returns a list of rendered surfaces, one for each line.
        """
        words = text.split(' ')
        lines = []
        current_line = ""

        for word in words:
            test_line = f"{current_line} {word}".strip()
            if font.size(test_line)[0] <= max_width:
                current_line = test_line
            else:
                lines.append(current_line)
                current_line = word

        lines.append(current_line)

        return [font.render(line, True, color) for line in lines if line]

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
