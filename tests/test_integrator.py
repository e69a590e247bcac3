"""Tests for the RK4 integrator and the CFL timestep controller.

Test categories:
1. Exact equilibria (quiescent air, inactive forcing)
2. Conservation and boundary invariants across steps
3. Fourth-order temporal convergence on an acoustic wave
4. Timestep controller limits and recompute cadence
"""

from __future__ import annotations

import numpy as np
import pytest

from smokering.constants import R_air, gamma_air, p_air, rho_air
from smokering.core.grid import Grid
from smokering.fluid.derived import FlowDiagnostics
from smokering.fluid.forcing import Forcing
from smokering.fluid.integrator import RK4Integrator, SimulationClock, cfl_timestep
from smokering.fluid.state import MX, PRS, RHO, FieldState


def _integrator(grid, state, air, forcing=None, **kwargs):
    return RK4Integrator(grid, state, forcing or Forcing.none(grid), **air, **kwargs)


class TestEquilibrium:
    def test_quiescent_stays_at_rest(self, grid, air, quiescent_state):
        initial = quiescent_state.data.copy()
        integ = _integrator(grid, quiescent_state, air)
        for _ in range(5):
            integ.advance()
        np.testing.assert_array_equal(integ.state.data, initial)

    def test_future_forcing_window_has_no_effect(self, grid, air, quiescent_state):
        initial = quiescent_state.data.copy()
        forcing = Forcing(grid, 100.0, 1.0, 2.0, 0.004, 0.01, 0.012, 0.006)
        integ = _integrator(grid, quiescent_state, air, forcing=forcing)
        for _ in range(5):
            integ.advance()
        np.testing.assert_array_equal(integ.state.data, initial)
        assert integ.last_envelope == 0.0


class TestInvariants:
    def test_mass_conserved(self, grid, air, perturbed_state):
        mass0 = np.sum(perturbed_state.rho[grid.interior])
        integ = _integrator(grid, perturbed_state, air)
        for _ in range(5):
            integ.advance()
        assert np.sum(integ.state.rho[grid.interior]) == pytest.approx(mass0, rel=1e-12)

    def test_ghosts_periodic_after_step(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air)
        integ.advance()
        data = integ.state.data
        np.testing.assert_array_equal(data[:, 0, :], data[:, -2, :])
        np.testing.assert_array_equal(data[:, -1, :], data[:, 1, :])
        np.testing.assert_array_equal(data[:, :, 0], data[:, :, -2])
        np.testing.assert_array_equal(data[:, :, -1], data[:, :, 1])

    def test_diagnostics_match_state(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air)
        integ.advance()
        fresh = FlowDiagnostics(grid, R_air)
        fresh.recompute(integ.state)
        np.testing.assert_array_equal(integ.diagnostics.vort, fresh.vort)
        np.testing.assert_array_equal(integ.diagnostics.temp, fresh.temp)

    def test_forcing_impulse(self, grid, air, quiescent_state):
        """Net x-momentum gain equals dt * sum(fx) times the Simpson mean of the envelope."""
        dt = 2.0e-6
        forcing = Forcing(grid, 100.0, 0.0, 4.0e-3, 0.004, 0.01, 0.012, 0.006)
        integ = _integrator(grid, quiescent_state, air, forcing=forcing, dt_fixed=dt)
        integ.advance()
        ramp = 1.0e-3
        mean_env = (0.0 + 4.0 * (0.5 * dt / ramp) + dt / ramp) / 6.0
        expected = dt * np.sum(forcing.fx[grid.interior]) * mean_env
        assert np.sum(integ.state.data[MX][grid.interior]) == pytest.approx(expected, rel=1e-6)
        assert integ.last_envelope == 0.0

    def test_clock_advances(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air)
        dt = integ.clock.dt
        total = 0.0
        for _ in range(3):
            total += integ.advance()
        assert integ.clock.step == 3
        assert total == pytest.approx(3 * dt)
        assert integ.clock.time == pytest.approx(total)


class TestTemporalOrder:
    """Classical RK4 error falls by ~2^4 when the timestep halves."""

    @staticmethod
    def _acoustic_state(grid, eps=1.0e-3):
        gamma = gamma_air
        c = np.sqrt(gamma * p_air / rho_air)
        k = 2.0 * np.pi / (grid.xmax - grid.xmin)
        X, _ = grid.mesh()
        s = np.sin(k * X)
        state = FieldState(grid)
        state.data[RHO] = rho_air * (1.0 + eps * s)
        state.data[PRS] = p_air * (1.0 + gamma * eps * s)
        state.data[MX] = rho_air * c * eps * s
        state.enforce_boundaries()
        return state

    def _run(self, grid, dt, n_steps):
        integ = RK4Integrator(
            grid, self._acoustic_state(grid), Forcing.none(grid),
            viscosity=0.0, thermal_diffusivity=0.0, gamma=gamma_air,
            gas_constant=R_air, dt_fixed=dt,
        )
        for _ in range(n_steps):
            integ.advance()
        return integ.state.data[MX][grid.interior].copy()

    def test_local_error_fifth_order(self):
        """One-step error falls by ~2^5 when dt halves."""
        grid = Grid(34, 6, 0.0, 0.032, 0.0, 0.004)
        dt = 2.0e-6
        err_full = np.max(np.abs(self._run(grid, dt, 1) - self._run(grid, dt / 32, 32)))
        err_half = np.max(np.abs(self._run(grid, dt / 2, 1) - self._run(grid, dt / 32, 16)))
        assert err_half > 0.0
        assert 24.0 < err_full / err_half < 40.0

    def test_fourth_order(self):
        grid = Grid(34, 6, 0.0, 0.032, 0.0, 0.004)
        dt, n = 1.0e-6, 8
        reference = self._run(grid, dt / 16, 16 * n)
        err_full = np.max(np.abs(self._run(grid, dt, n) - reference))
        err_half = np.max(np.abs(self._run(grid, dt / 2, 2 * n) - reference))
        assert err_half > 0.0
        ratio = err_full / err_half
        assert 12.0 < ratio < 20.0


class TestTimestepController:
    def test_sound_limit_at_rest(self, grid, quiescent_state):
        diag = FlowDiagnostics(grid, R_air)
        diag.recompute(quiescent_state)
        dt = cfl_timestep(diag, grid, gamma_air, viscosity=0.0, thermal_diffusivity=0.0)
        c = np.sqrt(gamma_air * p_air / rho_air)
        assert dt == pytest.approx(0.8 * grid.dmin / (c + 1e-10))
        assert np.isfinite(dt)

    def test_viscous_limit_dominates(self, grid, quiescent_state):
        diag = FlowDiagnostics(grid, R_air)
        diag.recompute(quiescent_state)
        dt = cfl_timestep(diag, grid, gamma_air, viscosity=1.0e3, thermal_diffusivity=0.0)
        assert dt == pytest.approx(0.2 * grid.dmin2 / 1.0e3)

    def test_thermal_limit_dominates(self, grid, quiescent_state):
        diag = FlowDiagnostics(grid, R_air)
        diag.recompute(quiescent_state)
        dt = cfl_timestep(diag, grid, gamma_air, viscosity=0.0, thermal_diffusivity=5.0e2)
        assert dt == pytest.approx(0.2 * grid.dmin2 / 5.0e2)

    def test_monotone_in_diffusion(self, grid, perturbed_state):
        diag = FlowDiagnostics(grid, R_air)
        diag.recompute(perturbed_state)
        previous = np.inf
        for nu in (0.0, 1e-5, 1e-3, 1e-1, 1e1):
            dt = cfl_timestep(diag, grid, gamma_air, viscosity=nu, thermal_diffusivity=0.0257)
            assert dt <= previous
            previous = dt

    def test_faster_flow_smaller_dt(self, grid, quiescent_state):
        diag = FlowDiagnostics(grid, R_air)
        diag.recompute(quiescent_state)
        dt_rest = cfl_timestep(diag, grid, gamma_air, 0.0, 0.0)
        quiescent_state.data[MX] = rho_air * 1.0e3
        diag.recompute(quiescent_state)
        dt_fast = cfl_timestep(diag, grid, gamma_air, 0.0, 0.0)
        assert dt_fast == pytest.approx(0.8 * grid.dmin / (1.0e3 + 1e-10))
        assert dt_fast < dt_rest

    def test_nan_sound_limit_propagates(self, grid, quiescent_state):
        """A NaN sound speed (negative temperature) is not skipped over by the other limits."""
        quiescent_state.data[PRS] = -p_air
        diag = FlowDiagnostics(grid, R_air)
        diag.recompute(quiescent_state)
        with np.errstate(invalid="ignore"):
            dt = cfl_timestep(diag, grid, gamma_air, viscosity=1.8e-5, thermal_diffusivity=0.0257)
        assert np.isnan(dt)

    def test_nan_timestep_warns(self, grid, air, quiescent_state, caplog):
        quiescent_state.data[PRS] = -p_air
        with np.errstate(invalid="ignore"):
            integ = _integrator(grid, quiescent_state, air)
        assert np.isnan(integ.clock.dt)
        assert "non-physical timestep" in caplog.text


class TestRecomputeCadence:
    def test_constructor_sets_timestep(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air)
        assert integ.timestep_updates == 1
        assert integ.clock.dt > 0.0

    def test_updates_every_k_steps(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air, recompute_interval=5)
        for _ in range(5):
            integ.advance()
        assert integ.timestep_updates == 1
        integ.advance()
        assert integ.timestep_updates == 2

    def test_dt_constant_between_updates(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air, recompute_interval=4)
        dts = [integ.advance() for _ in range(4)]
        assert len(set(dts)) == 1

    def test_fixed_timestep(self, grid, air, perturbed_state):
        integ = _integrator(grid, perturbed_state, air, recompute_interval=2, dt_fixed=1.0e-7)
        for _ in range(5):
            assert integ.advance() == 1.0e-7
        assert integ.timestep_updates == 0

    @pytest.mark.parametrize("kwargs", [{"recompute_interval": 0}, {"dt_fixed": 0.0}, {"dt_fixed": -1.0}])
    def test_invalid_arguments(self, grid, air, quiescent_state, kwargs):
        with pytest.raises(ValueError):
            _integrator(grid, quiescent_state, air, **kwargs)


class TestAccess:
    def test_fields_read_only(self, grid, air, quiescent_state):
        integ = _integrator(grid, quiescent_state, air)
        with pytest.raises(ValueError):
            integ.fields()[RHO, 1, 1] = 0.0

    def test_derived_read_only(self, grid, air, quiescent_state):
        integ = _integrator(grid, quiescent_state, air)
        with pytest.raises(ValueError):
            integ.derived("vort")[1, 1] = 1.0

    def test_clock_defaults(self):
        clock = SimulationClock()
        assert (clock.time, clock.step, clock.dt) == (0.0, 0, 0.0)
