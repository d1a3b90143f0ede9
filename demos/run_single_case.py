import numpy as np

from mini_frame import Joint, FrameElement, NodalLoad, Restraint, ModelSnapshot, run_analysis


def main():
    # Units: SI here (N, m, Pa). Keep consistent.
    L = 3.0
    E, G = 210e9, 81e9
    A, Iy, Iz, J = 0.01, 6.0e-6, 8.0e-6, 1.2e-5
    P = 1000.0  # N downward

    snap = ModelSnapshot(
        joints=[Joint(0, 0.0, 0.0, 0.0), Joint(1, L, 0.0, 0.0)],
        elements=[FrameElement(0, 0, 1, E=E, G=G, A=A, Iy=Iy, Iz=Iz, J=J)],
        loads=[NodalLoad(0, 1, Fy=-P)],
        restraints={0: Restraint.fixed(0)},
    )
    result = run_analysis(snap)

    ux, uy, uz, rx, ry, rz = result.displacement(1)
    print("Tip uy (m):", uy)
    print("Tip rz (rad):", rz)
    print("Reactions at fixed (Fx,Fy,Fz,Mx,My,Mz):", result.reactions()[0])

    # Closed-form checks
    print("Expected uy (m):", -P * L**3 / (3 * E * Iz))
    print("Expected rz (rad):", -P * L**2 / (2 * E * Iz))
    print("Max |K'U - F'|:", np.max(np.abs(result.residual())))


if __name__ == "__main__":
    main()
