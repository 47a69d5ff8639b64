"""Tests for units and geometry primitives.

Validates raw conversion at the unit boundary, 3-vector validation,
slice rotation and block/super-block construction helpers.
"""

from __future__ import annotations

import math

import pint
import pytest

from gwl_compiler.geometry.primitives import Block, HatchedSlice, SuperBlock
from gwl_compiler.geometry.units import (
    Q_,
    rotate_vector,
    to_raw,
    vector3,
    zero_vector,
)


def um(*values: float) -> pint.Quantity:
    return Q_(list(values), "um")


def raw(vec: pint.Quantity) -> list[float]:
    return list(vec.m_as("um"))


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------


class TestToRaw:
    def test_same_unit_keeps_type(self) -> None:
        value = to_raw(Q_(200, "um/s"), "um/s")
        assert value == 200
        assert isinstance(value, int)

    def test_converts_units(self) -> None:
        assert to_raw(Q_(1.5, "mm"), "um") == pytest.approx(1500.0)
        assert to_raw(Q_(0.02, "W"), "mW") == pytest.approx(20.0)

    def test_bare_number_is_not_a_length(self) -> None:
        with pytest.raises(pint.DimensionalityError):
            to_raw(5.0, "um")

    def test_bare_number_is_an_angle(self) -> None:
        assert to_raw(0.5, "rad") == pytest.approx(0.5)

    def test_degrees_to_radians(self) -> None:
        assert to_raw(Q_(180, "deg"), "rad") == pytest.approx(math.pi)

    def test_wrong_dimension(self) -> None:
        with pytest.raises(pint.DimensionalityError):
            to_raw(Q_(3, "mW"), "um/s")


class TestVector3:
    def test_quantity_array(self) -> None:
        v = vector3(Q_([1, 2, 3], "mm"))
        assert raw(v) == pytest.approx([1000.0, 2000.0, 3000.0])

    def test_sequence_of_mixed_units(self) -> None:
        v = vector3([Q_(1, "um"), Q_(1, "mm"), Q_(0, "nm")])
        assert raw(v) == pytest.approx([1.0, 1000.0, 0.0])

    def test_components_are_float(self) -> None:
        v = vector3(Q_([0, 0, 5], "um"))
        assert str(v.m_as("um")[2]) == "5.0"

    @pytest.mark.parametrize("n", [0, 2, 4])
    def test_wrong_length(self, n: int) -> None:
        with pytest.raises(ValueError, match="3 entries"):
            vector3(Q_([0.0] * n, "um"))
        with pytest.raises(ValueError, match="3 entries"):
            vector3([Q_(0.0, "um")] * n)

    def test_bare_numbers_rejected(self) -> None:
        with pytest.raises(pint.DimensionalityError):
            vector3([1.0, 2.0, 3.0])

    def test_zero_vector(self) -> None:
        assert raw(zero_vector()) == [0.0, 0.0, 0.0]

    def test_rotate_vector_about_z(self) -> None:
        v = rotate_vector(um(1, 0, 7), math.pi / 2)
        assert raw(v) == pytest.approx([0.0, 1.0, 7.0], abs=1e-12)


# ---------------------------------------------------------------------------
# HatchedSlice
# ---------------------------------------------------------------------------


class TestHatchedSlice:
    def test_points_normalised_to_tuples(self) -> None:
        hs = HatchedSlice([[[0, 0], [1, 2]], []])
        assert hs.hatchlines == (((0, 0), (1, 2)), ())
        assert hs.num_points == 2

    def test_point_must_be_2d(self) -> None:
        with pytest.raises(ValueError, match="expected 2"):
            HatchedSlice((((0, 0, 0),),))

    def test_quantity_points_converted_to_um(self) -> None:
        hs = HatchedSlice(((Q_([1.0, 2.0], "um"), Q_([0.003, 0.0], "mm")),))
        [(a, b)] = hs.hatchlines
        assert a == (1.0, 2.0)
        assert b == pytest.approx((3.0, 0.0))
        assert all(type(v) is float for v in a + b)

    def test_scalar_quantity_coordinates(self) -> None:
        hs = HatchedSlice((((Q_(1, "mm"), 0.5),),))
        assert hs.hatchlines[0][0] == pytest.approx((1000.0, 0.5))

    def test_non_length_coordinates_rejected(self) -> None:
        with pytest.raises(pint.DimensionalityError):
            HatchedSlice((((Q_(1.0, "mW"), Q_(0.0, "um")),),))

    def test_zero_rotation_returns_same_slice(self) -> None:
        hs = HatchedSlice((((0, 0), (5, 0)),))
        assert hs.rotate(0.0) is hs

    def test_rotation_preserves_order(self) -> None:
        hs = HatchedSlice((((1.0, 0.0), (2.0, 0.0)), ()))
        rotated = hs.rotate(Q_(90, "deg"))
        (a, b), empty = rotated.hatchlines
        assert a == pytest.approx((0.0, 1.0), abs=1e-12)
        assert b == pytest.approx((0.0, 2.0), abs=1e-12)
        assert empty == ()

    def test_immutable(self) -> None:
        hs = HatchedSlice(())
        with pytest.raises(AttributeError):
            hs.hatchlines = ()  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Block / SuperBlock
# ---------------------------------------------------------------------------


class TestBlock:
    def test_defaults(self) -> None:
        b = Block(())
        assert raw(b.origin) == [0.0, 0.0, 0.0]
        assert b.rotation == 0.0

    def test_z_values_sorted_and_distinct(self) -> None:
        hs = HatchedSlice(())
        b = Block(
            (
                (Q_(3.0, "um"), hs),
                (Q_(1.0, "um"), hs),
                (Q_(3, "um"), hs),
            )
        )
        assert [z.m_as("um") for z in b.z_values()] == pytest.approx([1.0, 3.0])

    def test_slices_at_keeps_insertion_order(self) -> None:
        a = HatchedSlice((((0, 0),),))
        c = HatchedSlice((((1, 1),),))
        b = Block(((Q_(2.0, "um"), a), (Q_(1.0, "um"), HatchedSlice(())), (Q_(2.0, "um"), c)))
        assert b.slices_at(Q_(2.0, "um")) == [a, c]

    def test_layers_must_be_slices(self) -> None:
        with pytest.raises(ValueError, match="HatchedSlice"):
            Block(((Q_(0.0, "um"), "slice"),))

    def test_z_must_be_length(self) -> None:
        with pytest.raises(pint.DimensionalityError):
            Block(((1.0, HatchedSlice(())),))

    def test_origin_must_have_three_entries(self) -> None:
        with pytest.raises(ValueError, match="3 entries"):
            Block((), um(1, 2))

    def test_rotation_in_degrees(self) -> None:
        b = Block((), rotation=Q_(90, "deg"))
        assert b.rotation == pytest.approx(math.pi / 2)

    def test_rotate_turns_origin_and_adds_angle(self) -> None:
        b = Block((), um(10, 0, 3), rotation=0.25)
        r = b.rotate(math.pi / 2)
        assert raw(r.origin) == pytest.approx([0.0, 10.0, 3.0], abs=1e-12)
        assert r.rotation == pytest.approx(0.25 + math.pi / 2)
        assert r.slices == b.slices

    def test_translate(self) -> None:
        b = Block((), um(1, 1, 1)).translate(um(1, -1, 0))
        assert raw(b.origin) == pytest.approx([2.0, 0.0, 1.0])


class TestSuperBlock:
    def test_children_validated(self) -> None:
        with pytest.raises(ValueError, match="Block or SuperBlock"):
            SuperBlock((HatchedSlice(()),))

    def test_accepts_nested(self) -> None:
        inner = SuperBlock((Block(()),))
        outer = SuperBlock([inner, Block(())])
        assert isinstance(outer.blocks, tuple)
        assert len(outer.blocks) == 2

    def test_rotate(self) -> None:
        sb = SuperBlock((Block(()),), um(0, 5, 0))
        r = sb.rotate(math.pi)
        assert raw(r.origin) == pytest.approx([0.0, -5.0, 0.0], abs=1e-12)
        assert r.rotation == pytest.approx(math.pi)
        assert r.blocks is sb.blocks

    def test_translate(self) -> None:
        sb = SuperBlock((), um(1, 2, 3)).translate(Q_([1, 0, 0], "mm"))
        assert raw(sb.origin) == pytest.approx([1001.0, 2.0, 3.0])
