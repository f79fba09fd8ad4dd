import pytest

from volstudio.structures import (
    Quaternion4f,
    Quaternion4s,
    RgbData,
    TextureVertex,
    Vector3f,
    Vector3fPair,
    to_float,
)


def test_addition_pinned():
    assert Vector3f(1, 2, 3) + Vector3f(4, 5, 6) == Vector3f(5, 7, 9)


def test_subtraction_undoes_addition():
    a = Vector3f(1.5, -2.0, 3.25)
    b = Vector3f(0.5, 4.0, -1.0)
    assert (a + b) - b == a


def test_multiplication_identity_and_zero():
    a = Vector3f(1.5, -2.0, 3.25)
    assert a * Vector3f(1, 1, 1) == a
    assert a * Vector3f(0, 0, 0) == Vector3f(0, 0, 0)


def test_augmented_addition_matches_addition():
    a = Vector3f(1, 2, 3)
    b = Vector3f(7, 8, 9)
    v = a
    v += b
    assert v == a + b
    assert a == Vector3f(1, 2, 3)


def test_augmented_multiplication_matches_multiplication():
    a = Vector3f(2, 3, 4)
    b = Vector3f(5, 6, 7)
    v = a
    v *= b
    assert v == a * b


def test_adding_non_vector_raises():
    with pytest.raises(TypeError):
        Vector3f(1, 2, 3) + 1


def test_to_float_scales_by_short_max():
    result = to_float(Quaternion4s(32767, -32767, 0, 32767))
    assert result == Quaternion4f(1.0, -1.0, 0.0, 1.0)


def test_to_float_keeps_float_quaternion():
    q = Quaternion4f(0.1, 0.2, 0.3, 0.4)
    assert to_float(q) is q


def test_to_float_stays_within_unit_range():
    result = to_float(Quaternion4s(100, -200, 300, 32767))
    for value in (result.x, result.y, result.z, result.w):
        assert -1.0 <= value <= 1.0


def test_to_float_rejects_other_types():
    with pytest.raises(TypeError):
        to_float(Vector3f(1, 2, 3))


def test_pair_and_records_hold_values():
    pair = Vector3fPair(Vector3f(0, 0, 0), Vector3f(1, 1, 1))
    assert pair.max - pair.min == Vector3f(1, 1, 1)
    assert TextureVertex(0.5, 0.25).y == 0.25
    assert RgbData(1, 2, 3, 4).rgb_flags == 4