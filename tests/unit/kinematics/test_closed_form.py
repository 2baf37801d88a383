"""
Unit tests for the closed-form IK wrapper.
"""

import math
from unittest.mock import patch

import pytest
from compas.geometry import Frame, Point, Vector

from robik.core.exceptions import (
    InvalidAngleDomainError,
    KinematicsError,
    NativeLibraryError,
    PlatformUnsupportedError,
)
from robik.core.robot import SENTINEL, RobotJointPosition
from robik.kinematics.closed_form import (
    ClosedFormSolver,
    NativeIkRoutine,
    is_64bit_process,
)

EMPTY = tuple(RobotJointPosition.sentinel())


class FakeRoutine:
    """Stand-in for a generated IK library."""

    def __init__(self, *solutions_deg):
        self.solutions = [
            solution if solution == EMPTY else tuple(math.radians(v) for v in solution)
            for solution in solutions_deg
        ]
        self.calls = []

    def __call__(self, position, quaternion):
        self.calls.append((list(position), list(quaternion)))
        return list(self.solutions)


@pytest.fixture
def target():
    return Frame(Point(1000, 200, 1500), Vector(0, 0, -1), Vector(0, 1, 0))


class TestClosedFormSolver:
    """Tests for ClosedFormSolver."""

    def test_converts_to_degrees(self, target):
        """Test routine output in radians is exposed in degrees."""
        solver = ClosedFormSolver(FakeRoutine((10, 20, 30, 40, 50, 60)))

        positions = solver.compute(target)

        assert solver.num_solutions == 1
        assert positions[0].to_list() == pytest.approx([10, 20, 30, 40, 50, 60])

    def test_skips_sentinel_slots(self, target):
        """Test empty slots are dropped and the count matches the list."""
        routine = FakeRoutine(
            EMPTY,
            (10, 20, 30, 40, 50, 60),
            EMPTY,
            (-10, 20, 30, -40, 50, -60),
        )
        solver = ClosedFormSolver(routine)

        solver.compute(target)

        assert solver.num_solutions == 2
        assert len(solver.robot_joint_positions) == solver.num_solutions
        assert not any(p.is_sentinel for p in solver.robot_joint_positions)

    def test_partial_sentinel_is_kept(self, target):
        """Test a slot is only empty when all six values are the sentinel."""
        solver = ClosedFormSolver(lambda position, quaternion: [(SENTINEL, 0, 0, 0, 0, 0)])
        solver.compute(target)
        assert solver.num_solutions == 1

    def test_only_sentinels(self, target):
        """Test a routine without solutions leaves an empty, zeroed result."""
        solver = ClosedFormSolver(FakeRoutine(EMPTY, EMPTY))

        solver.compute(target)

        assert solver.num_solutions == 0
        assert solver.robot_joint_positions == []
        assert solver.robot_joint_position.to_list() == [0.0] * 6

    def test_last_solution_accessor(self, target):
        """Test robot_joint_position is the last solution added."""
        routine = FakeRoutine((10, 20, 30, 40, 50, 60), (-100, 20, 30, 40, 50, 60))
        solver = ClosedFormSolver(routine)

        solver.compute(target)

        assert solver.robot_joint_position[0] == pytest.approx(-100)

    def test_emission_order_without_sort(self, target):
        """Test solutions keep the routine's order unless sorted."""
        routine = FakeRoutine((10, 0, 0, 0, 0, 0), (-100, 0, 0, 0, 0, 0))
        solver = ClosedFormSolver(routine)

        solver.compute(target)

        assert [round(p[0]) for p in solver.robot_joint_positions] == [10, -100]

    def test_sort_joint_positions(self, target):
        """Test opt-in ranking is stable and leaves the last-added accessor alone."""
        routine = FakeRoutine(
            (95, 0, 0, 0, 0, 0),
            (10, 1, 0, 0, 0, 0),
            (-95, 0, 0, 0, 0, 0),
            (10, 2, 0, 0, 0, 0),
        )
        solver = ClosedFormSolver(routine)
        solver.compute(target)

        solver.sort_joint_positions()

        assert [(round(p[0]), round(p[1])) for p in solver.robot_joint_positions] == [
            (-95, 0),
            (10, 1),
            (10, 2),
            (95, 0),
        ]
        assert solver.robot_joint_position[1] == pytest.approx(2)

    def test_sort_rejects_out_of_domain(self, target):
        """Test ranking fails for axis values outside (-180, 180]."""
        solver = ClosedFormSolver(FakeRoutine((0, 0, 0, 270, 0, 0), (0, 0, 0, 0, 0, 0)))
        solver.compute(target)

        with pytest.raises(InvalidAngleDomainError):
            solver.sort_joint_positions()

    def test_compute_replaces_previous_results(self, target):
        """Test each call starts from an empty solution list."""
        routine = FakeRoutine((10, 0, 0, 0, 0, 0), (20, 0, 0, 0, 0, 0))
        solver = ClosedFormSolver(routine)

        solver.compute(target)
        solver.compute(target)

        assert solver.num_solutions == 2

    def test_malformed_solution(self, target):
        """Test a solution without six values is rejected."""
        solver = ClosedFormSolver(lambda position, quaternion: [(0.0, 0.0, 0.0)])
        with pytest.raises(KinematicsError, match="six joint values"):
            solver.compute(target)

    def test_passes_position(self, target):
        """Test the routine receives the target origin."""
        routine = FakeRoutine((0, 0, 0, 0, 0, 0))
        ClosedFormSolver(routine).compute(target)

        position, quaternion = routine.calls[0]
        assert position == pytest.approx([1000, 200, 1500])
        assert len(quaternion) == 4

    def test_quaternion_against_reference(self):
        """Test the corrected frame is expressed relative to the reference frame."""
        routine = FakeRoutine((0, 0, 0, 0, 0, 0))
        solver = ClosedFormSolver(routine, reference_frame=Frame.worldXY())
        # Turned +90 degrees about local Z, which the correction undoes
        target = Frame(Point(1, 2, 3), Vector(0, 1, 0), Vector(-1, 0, 0))

        solver.compute(target)

        x, y, z, w = routine.calls[0][1]
        assert [x, y, z] == pytest.approx([0, 0, 0], abs=1e-9)
        assert abs(w) == pytest.approx(1.0)

    def test_default_reference_is_world_yz(self):
        """Test the default reference frame is world YZ."""
        routine = FakeRoutine((0, 0, 0, 0, 0, 0))
        solver = ClosedFormSolver(routine)
        target = Frame(Point(0, 0, 0), Vector(0, 0, 1), Vector(0, -1, 0))

        solver.compute(target)

        x, y, z, w = routine.calls[0][1]
        assert [x, y, z] == pytest.approx([0, 0, 0], abs=1e-9)
        assert abs(w) == pytest.approx(1.0)

    def test_quaternion_is_unit(self, target):
        """Test the routine receives a unit quaternion."""
        routine = FakeRoutine((0, 0, 0, 0, 0, 0))
        ClosedFormSolver(routine).compute(target)

        quaternion = routine.calls[0][1]
        assert math.sqrt(sum(q * q for q in quaternion)) == pytest.approx(1.0)

    def test_rejects_32bit_process(self, target):
        """Test computing fails before calling the routine on 32-bit."""
        routine = FakeRoutine((0, 0, 0, 0, 0, 0))
        solver = ClosedFormSolver(routine)

        with patch("robik.kinematics.closed_form.is_64bit_process", return_value=False):
            with pytest.raises(PlatformUnsupportedError) as exc_info:
                solver.compute(target)

        assert exc_info.value.platform is not None
        assert routine.calls == []


class TestNativeIkRoutine:
    """Tests for the ctypes binding."""

    def test_is_64bit_process(self):
        """Test the pointer width check matches sys.maxsize."""
        import sys

        assert is_64bit_process() == (sys.maxsize > 2**32)

    def test_missing_library(self, temp_dir):
        """Test a missing library raises NativeLibraryError."""
        path = temp_dir / "missing_ik.so"
        with pytest.raises(NativeLibraryError) as exc_info:
            NativeIkRoutine(path)
        assert exc_info.value.library == str(path)

    def test_rejects_32bit_process(self, temp_dir):
        """Test loading fails on a 32-bit interpreter."""
        with patch("robik.kinematics.closed_form.is_64bit_process", return_value=False):
            with pytest.raises(PlatformUnsupportedError):
                NativeIkRoutine(temp_dir / "missing_ik.so")
