import sys
import logging
import numpy as np

from radar_vad import fit_vad, vad_regrid, plot_vad, beam_propagation


def synthetic_volume(elevations=(1.0, 3.0, 6.0), n_gates=60, gate_spacing=250.0, n_rays=360,
                     noise=0.5, seed=0):
    """Radial wind from a veering, strengthening wind profile plus noise."""
    rng = np.random.default_rng(seed)
    azimuth = np.arange(n_rays) * 360.0 / n_rays
    ranges = (np.arange(n_gates) + 1) * gate_spacing

    vr, az, rg, el = [], [], [], []
    for elev in elevations:
        for r in ranges:
            height = beam_propagation(r, elev).height
            speed = 5.0 + height / 200.0
            direction = np.radians(200.0 + height / 20.0)  # wind from, veering with height
            u = -speed * np.sin(direction)
            v = -speed * np.cos(direction)
            a = np.radians(azimuth)
            radial_wind = (u * np.sin(a) + v * np.cos(a)) * np.cos(np.radians(elev))
            radial_wind = radial_wind + rng.normal(0.0, noise, n_rays)
            # blocked sector
            radial_wind[(azimuth > 100) & (azimuth < 120)] = np.nan

            vr.append(radial_wind)
            az.append(azimuth)
            rg.append(np.full(n_rays, r))
            el.append(np.full(n_rays, elev))

    return np.concatenate(vr), np.concatenate(az), np.concatenate(rg), np.concatenate(el)


def main_synthetic():
    print("=" * 60)
    print("RADAR_VAD - SYNTHETIC VOLUME EXAMPLE")
    print("=" * 60)

    radial_wind, azimuth, ranges, elevations = synthetic_volume()
    print(f"\n1. INPUT: {radial_wind.size:,} observations")

    print("\n2. VAD FIT")
    print("-" * 40)
    vad = fit_vad(radial_wind, azimuth, ranges, elevations, r2_min=0.8, outlier_threshold=3)
    print(vad)
    for row in vad.rows()[:5]:
        print(f"   {row}")

    print("\n3. REGRID")
    print("-" * 40)
    profile = vad_regrid(vad, layer_width=100.0, min_n=3)
    print(profile)

    plot_vad(profile, title="Synthetic VAD profile")


def main_radar(filepath):
    from radar_vad.radar import read_radar, fit_vad_radar

    print("=" * 60)
    print("RADAR_VAD - RADAR FILE EXAMPLE")
    print("=" * 60)

    radar = read_radar(filepath)
    vad = fit_vad_radar(radar, field="VRAD", r2_min=0.0)
    print(vad)
    plot_vad(vad, title=filepath)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) > 1:
        main_radar(sys.argv[1])
    else:
        main_synthetic()
