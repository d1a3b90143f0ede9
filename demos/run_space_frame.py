"""
Two-bay 3D frame: six fixed columns, girders in both directions,
gravity on every top joint and wind along +X.

    python demos/run_space_frame.py [--sparse] [--debug]
"""

import argparse

import pandas as pd

from mini_frame import AnalysisConfig, Model, Restraint, enable_debug_logging, run_analysis


def build_frame(bay=6.0, depth=5.0, height=4.0, gravity=-25e3, wind=6e3):
    # Steel HEB-ish section: E, G in Pa, geometry in m
    section = dict(E=210e9, G=81e9, A=7.8e-3, Iy=5.7e-5, Iz=2.0e-5, J=4.3e-7)

    m = Model()
    tops = {}
    for ix in range(3):
        for iy in range(2):
            base = m.add_joint(ix * bay, iy * depth, 0.0, id=f"B{ix}{iy}")
            top = m.add_joint(ix * bay, iy * depth, height, id=f"T{ix}{iy}")
            m.set_restraint(Restraint.fixed(base))
            m.add_element(base, top, id=f"C{ix}{iy}", **section)
            tops[ix, iy] = top

    for (ix, iy), top in tops.items():
        if (ix + 1, iy) in tops:
            m.add_element(top, tops[ix + 1, iy], id=f"GX{ix}{iy}", **section)
        if (ix, iy + 1) in tops:
            m.add_element(top, tops[ix, iy + 1], id=f"GY{ix}{iy}", **section)
        m.add_load(top, Fz=gravity)

    m.add_load(tops[0, 0], Fx=wind)
    m.add_load(tops[0, 1], Fx=wind)
    return m


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--sparse", action="store_true", help="use the sparse matrix backend")
    parser.add_argument("--debug", action="store_true", help="log pipeline stages")
    args = parser.parse_args()

    if args.debug:
        enable_debug_logging()

    config = AnalysisConfig(backend="sparse" if args.sparse else "dense")
    result = run_analysis(build_frame(), config)

    pd.set_option("display.float_format", "{:.4e}".format)
    pd.set_option("display.width", 160)

    print("=== Displacements ===")
    print(result.displacement_table())
    print("\n=== Reactions ===")
    print(result.reaction_table())
    print("\n=== Member end forces (local) ===")
    print(result.end_force_table())


if __name__ == "__main__":
    main()
