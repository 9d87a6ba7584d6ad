"""
Unit tests for radar_vad.radar module (PyART integration).

Uses mock radar objects with the PyART attribute layout.
"""

import pytest
import numpy as np
from unittest.mock import MagicMock, patch

pyart = pytest.importorskip("pyart")

from radar_vad.radar import (
    fit_vad_radar,
    get_velocity_observations,
    read_radar,
    resolve_field,
)

def _mock_radar(u=5.0, v=3.0, field_name='velocity', fixed_angle=(0.5, 1.5)):
    fixed_angle = np.asarray(fixed_angle, dtype='float64')
    nrays_per_sweep = 72
    gate_range = np.array([1000.0, 2000.0, 3000.0, 4000.0])

    azimuth = np.tile(np.arange(nrays_per_sweep) * 5.0, 2)
    # antenna elevation jitters around the nominal angle
    elevation = np.repeat(fixed_angle, nrays_per_sweep) + np.tile([0.02, -0.03], nrays_per_sweep)

    az = np.radians(azimuth)[:, None]
    el = np.radians(np.repeat(fixed_angle, nrays_per_sweep))[:, None]
    data = (u * np.sin(az) + v * np.cos(az)) * np.cos(el) * np.ones((1, gate_range.size))

    radar = MagicMock(spec=pyart.core.Radar)
    radar.nsweeps = 2
    radar.nrays = 2 * nrays_per_sweep
    radar.ngates = gate_range.size
    radar.fixed_angle = {'data': fixed_angle}
    radar.sweep_start_ray_index = {'data': np.array([0, 72])}
    radar.sweep_end_ray_index = {'data': np.array([71, 143])}
    radar.azimuth = {'data': azimuth}
    radar.elevation = {'data': elevation}
    radar.range = {'data': gate_range}
    radar.fields = {
        field_name: {'data': np.ma.array(data, mask=np.zeros(data.shape, dtype=bool))},
        'DBZH': {'data': np.ma.zeros(data.shape)},
    }
    return radar


class TestResolveField:
    """Test resolve_field function."""

    def test_alias(self):
        radar = _mock_radar(field_name='corrected_velocity')
        assert resolve_field(radar, 'VRAD') == 'corrected_velocity'

    def test_exact_name(self):
        radar = _mock_radar(field_name='velocity')
        assert resolve_field(radar, 'velocity') == 'velocity'

    def test_missing_field(self):
        radar = _mock_radar()
        radar.fields.pop('velocity')
        with pytest.raises(KeyError, match="VRAD"):
            resolve_field(radar, 'VRAD')


class TestGetVelocityObservations:
    """Test get_velocity_observations function."""

    def test_shapes(self):
        radar = _mock_radar()

        radial_wind, azimuth, ranges, elevations = get_velocity_observations(radar)

        n = 2 * 72 * 4
        assert isinstance(radial_wind, np.ma.MaskedArray)
        assert radial_wind.shape == (n,)
        assert azimuth.shape == (n,)
        assert ranges.shape == (n,)
        assert elevations.shape == (n,)

    def test_nominal_elevation(self):
        """Gates take the sweep's fixed angle, not the jittered ray elevation."""
        radar = _mock_radar()

        _, _, _, elevations = get_velocity_observations(radar)

        np.testing.assert_array_equal(np.unique(elevations), [0.5, 1.5])

    def test_ray_gate_layout(self):
        radar = _mock_radar()

        radial_wind, azimuth, ranges, _ = get_velocity_observations(radar, sweeps=[1])

        # second ray of the second sweep, third gate
        i = 1 * 4 + 2
        assert azimuth[i] == 5.0
        assert ranges[i] == 3000.0
        assert radial_wind[i] == radar.fields['velocity']['data'][73, 2]

    def test_invalid_values_masked(self):
        radar = _mock_radar()
        radar.fields['velocity']['data'][0, 0] = np.nan

        radial_wind, _, _, _ = get_velocity_observations(radar)

        assert radial_wind.mask[0]

    def test_sweep_without_velocity_skipped(self):
        radar = _mock_radar(fixed_angle=(0.5, 0.5))
        radar.fields['velocity']['data'][72:144] = np.nan

        radial_wind, azimuth, ranges, elevations = get_velocity_observations(radar)

        assert radial_wind.size == 72 * 4
        assert np.ma.count(radial_wind) == 72 * 4
        np.testing.assert_array_equal(np.unique(elevations), [0.5])

    def test_no_sweeps(self):
        radar = _mock_radar()

        radial_wind, azimuth, ranges, elevations = get_velocity_observations(radar, sweeps=[])

        assert radial_wind.size == 0
        assert azimuth.size == 0


class TestFitVADRadar:
    """Test fit_vad_radar function."""

    def test_recovers_wind(self):
        radar = _mock_radar(u=-4.0, v=8.0)

        vad = fit_vad_radar(radar)

        assert len(vad) == 8
        assert vad.n_valid() == 8
        np.testing.assert_allclose(np.ma.getdata(vad.u), -4.0, atol=1e-9)
        np.testing.assert_allclose(np.ma.getdata(vad.v), 8.0, atol=1e-9)

    def test_split_cut(self):
        """A surveillance sweep without velocity does not dilute the Doppler sweep."""
        radar = _mock_radar(u=5.0, v=3.0, fixed_angle=(0.5, 0.5))
        radar.fields['velocity']['data'][0:72] = np.ma.masked

        vad = fit_vad_radar(radar)

        assert len(vad) == 4
        assert vad.n_valid() == 4
        np.testing.assert_allclose(np.ma.getdata(vad.u), 5.0, atol=1e-9)
        np.testing.assert_allclose(np.ma.getdata(vad.v), 3.0, atol=1e-9)

    def test_kwargs_forwarded(self):
        radar = _mock_radar()

        vad = fit_vad_radar(radar, sweeps=[0], r2_min=0.5)

        assert len(vad) == 4
        assert vad.params['r2_min'] == 0.5


class TestReadRadar:
    """Test read_radar function."""

    def test_uses_pyart_reader(self):
        radar = _mock_radar()
        with patch('radar_vad.radar.pyart.io.read', return_value=radar) as reader:
            result = read_radar('volume.nc')

        reader.assert_called_once_with('volume.nc')
        assert result is radar
