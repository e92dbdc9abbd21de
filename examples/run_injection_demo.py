#!/usr/bin/env python3
"""
Split Injection Demonstration Script

Builds an injection context from flat calibration curves, switches between
single, double and triple intake injection and prints the resulting
pulsewidths and injection windows for one operating point.
"""

import os
import sys

# Add the parent directory to the path to find the package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from split_injection.calibration import FunctionLookup, TableLookup, CalibrationSet
from split_injection.errors import UnsupportedShotCountError
from split_injection.injection import InjectionContext, ShotCount


def create_demo_calibration() -> CalibrationSet:
    """Create a calibration with flat curves so results are easy to check by hand."""
    return CalibrationSet({
        'FNINJSLOPE1F': FunctionLookup.constant(10.0, name='FNINJSLOPE1F'),
        'FNDINJSLPCOR': FunctionLookup.constant(1.0, name='FNDINJSLPCOR'),
        'FNINJ_OP_DLY': FunctionLookup.constant(0.0, name='FNINJ_OP_DLY'),
        'FNFUL_INJ_OFF_COR': FunctionLookup.constant(0.0, name='FNFUL_INJ_OFF_COR'),
        'FNINJ_CL_DLY': TableLookup.constant(0.0, name='FNINJ_CL_DLY'),
        'DIMINPW1': 100.0,
        'DIPWADJ': 0.0,
        'NUMCYL': 4
    }, source='demo')


def run_injection_demo():
    """Run the demonstration for every supported shot count."""
    context = InjectionContext(create_demo_calibration(), separation=500.0)

    fuel_mass = 0.002      # lb
    engine_speed = 6000.0  # RPM
    rail_pressure = 2000.0  # psi
    rail_temp = 120.0      # deg F
    soi = 300.0            # deg BTDC power stroke
    separation = 400.0     # us, below the 500 us minimum so it is clipped

    for shot_count in (ShotCount.SINGLE, ShotCount.DOUBLE, ShotCount.TRIPLE):
        context.set_shot_count(shot_count)
        total, effective = context.calculate_pulsewidth(fuel_mass, rail_pressure, rail_temp)
        start, end = context.calculate_injection_angles(
            fuel_mass, engine_speed, rail_pressure, rail_temp, soi, separation
        )
        ok = context.constraint_met(
            fuel_mass, engine_speed, rail_pressure, rail_temp, soi, separation=separation
        )

        print(f"\n{shot_count.label}:")
        print(f"  Total pulsewidth per shot:     {total:.1f} us")
        print(f"  Effective pulsewidth per shot: {effective:.1f} us")
        print(f"  SOI [deg BTDC]: {start}")
        print(f"  EOI [deg BTDC]: {end}")
        print(f"  Ends before BDC intake: {ok}")

    try:
        context.set_shot_count(ShotCount.QUADRUPLE)
    except UnsupportedShotCountError as e:
        print(f"\n{ShotCount.QUADRUPLE.label}: {str(e)}")
        print(f"  Still using {context.shot_count.label}")


if __name__ == "__main__":
    run_injection_demo()
