# main.py
"""
Main entry point for the Quantum Tunneling visualization.

This script orchestrates the entire application lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the simulation and the display window.
4. Runs the fixed-period frame loop.
5. Handles clean shutdown.
"""
import logging
import cProfile
import pstats
import io
import sys

import pygame

from utils import setup_logging, load_config, load_run_control


def run(config) -> int:
    """
    Runs the frame loop until the window closes or max_steps is reached.

    Returns:
        int: The number of frames drawn.
    """
    sim_params = config.get('simulation_parameters', {})
    vis_params = config.get('visualization', {})

    from simulation import Simulation, SimulationParameters
    from visualization import Visualizer

    try:
        params = SimulationParameters.from_config(sim_params)
        run_control = load_run_control(config)
    except ValueError as e:
        logging.critical(f"Configuration error: {e}")
        raise

    sim = Simulation(params, seed=sim_params.get('seed'))
    if sim_params.get('autoplay', False):
        sim.play()

    visualizer = Visualizer(fullscreen=vis_params.get('fullscreen', False))
    clock = pygame.time.Clock()

    fps = run_control.fps
    log_throttle = run_control.log_throttle_steps
    max_steps = run_control.max_steps

    frames = 0
    try:
        while visualizer.draw(sim):
            frames += 1

            # Rule 2.4: Hot loops must throttle logs
            if frames % log_throttle == 0:
                counts = sim.outcome_counts()
                logging.info(f"Frame {frames} (simulation step {sim.step_count}).")
                logging.debug(
                    f"Frame {frames} | Particles: {len(sim.particles)} | "
                    f"Tunneled: {counts.tunneled} | Reflected: {counts.reflected} | "
                    f"P = {sim.params.tunneling_probability():.6f}"
                )

            if max_steps and sim.step_count >= max_steps:
                logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
                break

            clock.tick(fps)
    finally:
        visualizer.close()

    logging.info("Frame loop finished.")
    return frames


def main():
    """
    The main function to run the visualization.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return 1

    setup_logging(config)

    logging.info("--- Quantum Tunneling Visualization Starting ---")

    if not config.get('run_control', {}).get('profile', False):
        run(config)
    else:
        profiler = cProfile.Profile()
        profiler.enable()
        run(config)
        profiler.disable()

        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Quantum Tunneling Visualization Shutting Down ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
