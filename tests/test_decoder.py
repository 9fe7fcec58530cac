"""Frame decoding regression tests."""

from __future__ import annotations

import sys

import pytest

from dcs_dash.telemetry.decoder import (
    MalformedPacket,
    Paired,
    Scalar,
    decode_datagram,
    decode_frame,
    split_frames,
)
from tests.helpers import DEEPLY_NESTED, build_datagram, build_frame, decode_one


def test_decode_frame_reads_flight_fields() -> None:
    sample = decode_one(
        name="F-16C_50",
        lat=41.93,
        lon=41.87,
        alt_msl=1520.5,
        alt_agl=1200.0,
        ias_ms=150.0,
        tas_ms=160.0,
        mach=0.48,
        aoa_rad=0.05,
        vv_ms=-2.5,
        att={"pitch": 0.1, "bank": -0.2, "yaw": 1.5},
        accel={"x": 0.0, "y": 1.0, "z": 0.02},
    )

    assert sample.name == "F-16C_50"
    assert sample.lat == pytest.approx(41.93)
    assert sample.ias_ms == pytest.approx(150.0)
    assert sample.vv_ms == pytest.approx(-2.5)
    assert sample.attitude is not None and sample.attitude.bank == pytest.approx(-0.2)
    assert sample.accel is not None and sample.accel.y == pytest.approx(1.0)
    assert sample.engine is None
    assert sample.mech is None


def test_null_and_missing_fields_are_absent_not_zero() -> None:
    sample = decode_one(ias_ms=None, mach=None)

    assert sample.ias_ms is None
    assert sample.mach is None
    assert sample.alt_msl is None


def test_non_finite_numbers_are_treated_as_absent() -> None:
    sample = decode_frame(b'{"ias_ms": NaN, "tas_ms": Infinity, "alt_msl": 12}')

    assert sample.ias_ms is None
    assert sample.tas_ms is None
    assert sample.alt_msl == pytest.approx(12.0)


def test_wrong_types_are_ignored() -> None:
    sample = decode_one(ias_ms="fast", mach=True, name=42, att=[1, 2, 3])

    assert sample.ias_ms is None
    assert sample.mach is None
    assert sample.name is None
    assert sample.attitude is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (87.5, Scalar(87.5)),
        ({"L": 80.0, "R": 82.0}, Paired(80.0, 82.0)),
        ({"left": 80.0, "right": 82.0}, Paired(80.0, 82.0)),
        ({"l": 70.0}, Paired(70.0, None)),
        ([60.0, 61.0], Paired(60.0, 61.0)),
        ([None, 61.0], Paired(None, 61.0)),
        ({"L": None, "R": None}, None),
        (None, None),
    ],
)
def test_engine_channel_variants(value: object, expected: object) -> None:
    sample = decode_one(engine={"rpm": value})

    assert sample.engine is not None
    assert sample.engine.rpm == expected


def test_engine_flags_and_channels() -> None:
    sample = decode_one(
        engine={
            "thrtl": {"L": 0.5, "R": 0.6},
            "thrtl_est": 1,
            "noz": 0.2,
            "noz_present": True,
            "temp": 650,
            "fuelf": 0.9,
            "map_present": False,
        }
    )

    engine = sample.engine
    assert engine is not None
    assert engine.throttle == Paired(0.5, 0.6)
    assert engine.throttle_estimated is True
    assert engine.nozzle == Scalar(0.2)
    assert engine.nozzle_present is True
    assert engine.temperature == Scalar(650.0)
    assert engine.fuel_flow == Scalar(0.9)
    assert engine.manifold is None
    assert engine.manifold_present is False


def test_mech_accepts_booleans_and_value_objects() -> None:
    sample = decode_one(
        mech={
            "gear": {"value": 1},
            "flaps": 0.5,
            "hook": False,
            "airbrake": True,
            "wow": 1,
            "wow_guess": True,
        }
    )

    mech = sample.mech
    assert mech is not None
    assert mech.gear == pytest.approx(1.0)
    assert mech.flaps == pytest.approx(0.5)
    assert mech.hook == pytest.approx(0.0)
    assert mech.airbrake == pytest.approx(1.0)
    assert mech.wing is None
    assert mech.wow == pytest.approx(1.0)
    assert mech.wow_guess is True


@pytest.mark.parametrize(
    "frame",
    [
        b"{not json",
        b"[1, 2, 3]",
        b'"hello"',
        b"\xff\xfe\x00",
        pytest.param(
            b"{\"alt_msl\": " + b"9" * 5000 + b"}",
            marks=pytest.mark.skipif(
                not hasattr(sys, "get_int_max_str_digits"),
                reason="interpreter has no integer digit limit",
            ),
        ),
        DEEPLY_NESTED,
    ],
    ids=["syntax", "array", "string", "utf8", "digit-limit", "deep-nesting"],
)
def test_malformed_frames_raise(frame: bytes) -> None:
    with pytest.raises(MalformedPacket):
        decode_frame(frame)


def test_number_too_large_for_float_is_absent() -> None:
    sample = decode_frame(b"{\"alt_msl\": 1" + b"0" * 400 + b", \"ias_ms\": 100}")

    assert sample.alt_msl is None
    assert sample.ias_ms == pytest.approx(100.0)


def test_unknown_keys_are_ignored() -> None:
    sample = decode_one(ias_ms=100.0, future_field={"x": 1})

    assert sample.ias_ms == pytest.approx(100.0)


def test_split_frames_drops_blank_lines_and_whitespace() -> None:
    payload = b'{"a": 1}\n\n  \r\n{"b": 2}\r\n'

    assert split_frames(payload) == [b'{"a": 1}', b'{"b": 2}']


def test_decode_datagram_returns_every_frame() -> None:
    payload = build_datagram(build_frame(ias_ms=100.0), {"ias_ms": 110.0})

    samples = decode_datagram(payload)

    assert [sample.ias_ms for sample in samples] == [100.0, 110.0]


def test_decode_datagram_raises_on_invalid_frame() -> None:
    payload = build_datagram(build_frame(ias_ms=100.0), b"garbage")

    with pytest.raises(MalformedPacket):
        decode_datagram(payload)
