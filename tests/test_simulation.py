import pytest

from particle import Particle
from physics import Mode, tunneling_probability
from simulation import Simulation, SimulationParameters


class TestSimulationParameters:
    def test_defaults(self):
        params = SimulationParameters()
        assert params.mode is Mode.SEMICONDUCTOR
        assert params.barrier_width_nm == 50
        assert params.energy_percent == 60

    @pytest.mark.parametrize("width", [0, 19, 101, -5])
    def test_rejects_width_out_of_range(self, width):
        with pytest.raises(ValueError):
            SimulationParameters(barrier_width_nm=width)

    @pytest.mark.parametrize("energy", [0, 19, 101])
    def test_rejects_energy_out_of_range(self, energy):
        with pytest.raises(ValueError):
            SimulationParameters(energy_percent=energy)

    @pytest.mark.parametrize("bad", [50.5, "50", True, None])
    def test_rejects_non_integers(self, bad):
        with pytest.raises(ValueError):
            SimulationParameters(barrier_width_nm=bad)

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValueError):
            SimulationParameters(mode="semiconductor")

    def test_accepts_range_bounds(self):
        SimulationParameters(barrier_width_nm=20, energy_percent=100)
        SimulationParameters(barrier_width_nm=100, energy_percent=20)

    def test_with_changes_validates(self):
        params = SimulationParameters()
        assert params.with_changes(energy_percent=90).energy_percent == 90
        with pytest.raises(ValueError):
            params.with_changes(barrier_width_nm=0)

    def test_from_config(self):
        params = SimulationParameters.from_config(
            {"mode": "Superconductor", "barrier_width_nm": 30, "energy_percent": 70}
        )
        assert params == SimulationParameters(Mode.SUPERCONDUCTOR, 30, 70)

    def test_from_config_defaults(self):
        assert SimulationParameters.from_config({}) == SimulationParameters()

    def test_from_config_unknown_mode(self):
        with pytest.raises(ValueError, match="metal"):
            SimulationParameters.from_config({"mode": "metal"})

    def test_geometry_follows_mode(self):
        semi = SimulationParameters(Mode.SEMICONDUCTOR, 40, 60).geometry()
        super_ = SimulationParameters(Mode.SUPERCONDUCTOR, 40, 60).geometry()
        assert semi.height == 120
        assert super_.height == 80
        assert semi.width == super_.width == 40

    def test_probability_matches_model(self):
        params = SimulationParameters(Mode.SUPERCONDUCTOR, 35, 45)
        assert params.tunneling_probability() == tunneling_probability(45, 80, 35)


class TestSimulation:
    def test_starts_paused_and_empty(self):
        sim = Simulation(seed=0)
        assert not sim.playing
        assert sim.particles == []

    def test_paused_tick_does_not_advance(self):
        sim = Simulation(seed=0)
        sim.particles.append(Particle(x=100, y=200))
        for _ in range(10):
            sim.tick()
        assert sim.particles == [Particle(x=100, y=200)]
        assert sim.step_count == 0

    def test_frame_counter_only_moves_while_playing(self):
        sim = Simulation(seed=0)
        counters = [sim.tick().frame_counter for _ in range(3)]
        sim.play()
        counters += [sim.tick().frame_counter for _ in range(3)]
        sim.pause()
        counters += [sim.tick().frame_counter for _ in range(2)]
        assert counters == [0, 0, 0, 1, 2, 3, 3, 3]

    def test_playing_tick_advances(self):
        sim = Simulation(seed=0)
        sim.particles.append(Particle(x=100, y=200))
        sim.play()
        frame = sim.tick()
        assert sim.particles[0].x == 102
        assert sim.step_count == 1
        assert frame.particles[0].x == 102

    def test_frame_particles_are_copies(self):
        sim = Simulation(seed=0)
        sim.particles.append(Particle(x=100, y=200))
        sim.play()
        frame = sim.tick()
        assert frame.particles[0] is not sim.particles[0]
        sim.tick()
        sim.particles[0].reflected = True
        assert frame.particles[0].x == 102
        assert not frame.particles[0].reflected
        assert frame.frame_counter == 1

    def test_frame_is_consistent_snapshot(self):
        sim = Simulation(SimulationParameters(Mode.SUPERCONDUCTOR, 70, 55), seed=0)
        frame = sim.tick()
        assert frame.params == sim.params
        assert frame.geometry == frame.params.geometry()
        assert frame.probability == frame.params.tunneling_probability()

    def test_frame_particles_is_snapshot(self):
        sim = Simulation(seed=0)
        sim.particles.append(Particle(x=100, y=200))
        frame = sim.tick()
        sim.particles.clear()
        assert len(frame.particles) == 1

    def test_paused_frame_reflects_live_edits(self):
        sim = Simulation(seed=0)
        sim.particles.append(Particle(x=100, y=200))
        before = sim.tick()
        sim.set_mode(Mode.SUPERCONDUCTOR)
        sim.set_barrier_width(80)
        after = sim.tick()
        assert after.geometry.height == 80
        assert after.geometry.width == 80
        assert after.probability != before.probability
        assert after.particles[0].x == 100

    def test_reset_clears_and_stops(self):
        sim = Simulation(seed=0)
        sim.play()
        for _ in range(400):
            sim.tick()
        sim.particles.append(Particle(x=100, y=200))
        sim.reset()
        assert not sim.playing
        assert sim.particles == []
        steps = sim.step_count
        for _ in range(200):
            sim.tick()
        assert sim.particles == []
        assert sim.step_count == steps

    def test_play_after_reset_resumes(self):
        sim = Simulation(seed=0)
        sim.reset()
        sim.play()
        sim.tick()
        assert sim.step_count == 1

    def test_toggle_playing(self):
        sim = Simulation(seed=0)
        sim.toggle_playing()
        assert sim.playing
        sim.toggle_playing()
        assert not sim.playing

    def test_toggle_mode(self):
        sim = Simulation(seed=0)
        sim.toggle_mode()
        assert sim.params.mode is Mode.SUPERCONDUCTOR
        sim.toggle_mode()
        assert sim.params.mode is Mode.SEMICONDUCTOR

    def test_adjusters_clamp(self):
        sim = Simulation(seed=0)
        sim.set_barrier_width(500)
        sim.set_energy(0)
        assert sim.params.barrier_width_nm == 100
        assert sim.params.energy_percent == 20
        sim.set_barrier_width(-3)
        sim.set_energy(1000)
        assert sim.params.barrier_width_nm == 20
        assert sim.params.energy_percent == 100

    def test_parameter_edits_replace_snapshot(self):
        sim = Simulation(seed=0)
        old = sim.params
        sim.set_energy(90)
        assert old.energy_percent == 60
        assert sim.params is not old

    def test_outcome_counts(self):
        sim = Simulation(seed=0)
        sim.particles.extend([
            Particle(x=10, y=200),
            Particle(x=400, y=200, decided=True, tunneled=True),
        ])
        counts = sim.outcome_counts()
        assert (counts.approaching, counts.tunneled, counts.reflected) == (1, 1, 0)
