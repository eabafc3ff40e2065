# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Sample descriptors and the state they are resolved from.

GroupDefaults holds the values set by the active <group> line and is never
modified once built. RegionOverrides collects what a single <region> line
sets. resolve_descriptor combines the two into the immutable
SampleDescriptor handed to the sampler engine.
"""

from dataclasses import dataclass

from .constants import (
    A4_FREQUENCY,
    A4_NOTE_NUMBER,
    DEFAULT_HIGH_NOTE,
    DEFAULT_HIGH_VELOCITY,
    DEFAULT_LOW_NOTE,
    DEFAULT_LOW_VELOCITY,
    DEFAULT_NOTE_NUMBER,
    NO_LOOP,
)


def note_frequency(note_number):
    """
    Converts a MIDI note number to Hz (12-tone equal temperament, A4 = 440 Hz).
    """
    return A4_FREQUENCY * 2.0 ** ((note_number - A4_NOTE_NUMBER) / 12.0)


@dataclass(frozen=True)
class GroupDefaults:
    note_number: int = DEFAULT_NOTE_NUMBER
    low_note: int = DEFAULT_LOW_NOTE
    high_note: int = DEFAULT_HIGH_NOTE
    low_velocity: int = DEFAULT_LOW_VELOCITY
    high_velocity: int = DEFAULT_HIGH_VELOCITY
    tune: int = 0
    gain: float = 0.0
    pan: float = 0.0


@dataclass
class RegionOverrides:
    """
    Values given on one <region> line.

    None means the opcode was not present and the group value (or the
    default) applies. tune, gain and pan are deltas added to the group values.
    """
    note_number: int | None = None
    low_note: int | None = None
    high_note: int | None = None
    low_velocity: int | None = None
    high_velocity: int | None = None
    loop_mode: str | None = None
    loop_start: float | None = None
    loop_end: float | None = None
    start: float | None = None
    end: float | None = None
    tune: int = 0
    gain: float = 0.0
    pan: float = 0.0
    sample: str = ""


@dataclass(frozen=True)
class SampleDescriptor:
    note_number: int
    tune: int
    note_frequency: float
    minimum_note_number: int
    maximum_note_number: int
    minimum_velocity: int
    maximum_velocity: int
    is_looping: bool
    loop_start_point: float
    loop_end_point: float
    start_point: float
    end_point: float
    gain: float
    pan: float


@dataclass(frozen=True)
class SampleFileDescriptor:
    """A descriptor together with the resolved path of its sample file."""
    descriptor: SampleDescriptor
    path: str


def _pick(override, fallback):
    return fallback if override is None else override


def resolve_descriptor(group: GroupDefaults, region: RegionOverrides) -> SampleDescriptor:
    """
    Merges the active group defaults with one region's overrides.

    Args:
        group: The defaults of the enclosing <group> (or GroupDefaults()).
        region: The values parsed from the <region> line.

    Returns:
        The resolved SampleDescriptor.
    """
    note_number = _pick(region.note_number, group.note_number)
    loop_mode = _pick(region.loop_mode, NO_LOOP)

    return SampleDescriptor(
        note_number=note_number,
        tune=group.tune + region.tune,
        note_frequency=note_frequency(note_number),
        minimum_note_number=_pick(region.low_note, group.low_note),
        maximum_note_number=_pick(region.high_note, group.high_note),
        minimum_velocity=_pick(region.low_velocity, group.low_velocity),
        maximum_velocity=_pick(region.high_velocity, group.high_velocity),
        is_looping=loop_mode != NO_LOOP,
        loop_start_point=_pick(region.loop_start, 0.0),
        loop_end_point=_pick(region.loop_end, 0.0),
        start_point=_pick(region.start, 0.0),
        end_point=_pick(region.end, 0.0),
        gain=group.gain + region.gain,
        pan=group.pan + region.pan,
    )
