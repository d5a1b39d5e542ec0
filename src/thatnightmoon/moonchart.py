"""CLI entry point for moon phase charts.

    uv run moonchart --when "2000-01-21T04:40Z" --lat -37.8136 --lon 144.9631
"""

import argparse
import logging
import math
from pathlib import Path

from dotenv import load_dotenv

from thatnightmoon.ephemeris import get_default_provider
from thatnightmoon.geocode import coordinate_label, location_name
from thatnightmoon.renderers.static import save_static_disk
from thatnightmoon.solver import sanitize_instant, solve, synodic_age_days


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    p = argparse.ArgumentParser(prog="moonchart", description="Moon phase readout and PNG for an observer")
    p.add_argument("--when", default=None, help="ISO-8601 instant (default: now, UTC if no offset)")
    p.add_argument("--lat", type=float, default=-37.8136, help="Latitude in degrees")
    p.add_argument("--lon", type=float, default=144.9631, help="Longitude in degrees")
    p.add_argument("--elevation", type=float, default=0.0, help="Elevation in metres")
    p.add_argument("--orientation", choices=["phase", "sky"], default="phase")
    p.add_argument("--output", type=Path, default=None, help="PNG path (default: results/...)")
    p.add_argument("--no-geocode", action="store_true", help="Skip the reverse geocoder")
    p.add_argument("--debug", action="store_true")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    provider = get_default_provider()
    instant = sanitize_instant(args.when, provider)
    sol = solve(instant, args.lat, args.lon, args.elevation, provider=provider)
    if args.no_geocode:
        place = coordinate_label(args.lat, args.lon)
    else:
        place = location_name(args.lat, args.lon)

    print(f"Location : {place}")
    print(f"Instant  : {instant.isoformat(timespec='minutes')}")
    print(f"Phase    : {sol.phase_emoji} {sol.phase_name} ({sol.illum_fraction * 100:.1f}%)")
    print(f"Age      : {synodic_age_days(instant):.1f} d")
    print(f"Distance : {sol.distance_km:,.0f} km")
    print(f"RA/Dec   : {sol.ra:.4f}h {sol.dec:+.4f}°")
    print(
        "Angles   : "
        f"parallactic {math.degrees(sol.parallactic_angle_rad):.1f}°, "
        f"bright limb {math.degrees(sol.bright_limb_angle_rad):.1f}°, "
        f"pole {math.degrees(sol.pole_angle_rad):.1f}°"
    )
    print(f"Libration: lat {sol.mlat:+.2f}°, lon {sol.mlon:+.2f}°")

    path = save_static_disk(sol, instant, place, args.output, args.orientation)
    print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
