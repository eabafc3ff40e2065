# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

from .descriptor import SampleDescriptor, SampleFileDescriptor, note_frequency
from .errors import SampleLoadError, SFZError, SFZReadError
from .loader import SamplerEngine, SFZLoader, load_sfz, load_sfz_from
from .sampler import KeyMappedSampleBuffer, KeyMappedSampler

__all__ = [
    "KeyMappedSampleBuffer",
    "KeyMappedSampler",
    "SampleDescriptor",
    "SampleFileDescriptor",
    "SampleLoadError",
    "SamplerEngine",
    "SFZError",
    "SFZLoader",
    "SFZReadError",
    "load_sfz",
    "load_sfz_from",
    "note_frequency"
]
