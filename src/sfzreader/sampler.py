# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Key-mapped sampler engine.

Receives the regions of an SFZ load, keeps their PCM data in memory and maps
MIDI note numbers to the sample buffers that should sound for them.
"""

import sys
from dataclasses import dataclass

try:
    import numpy as np
except ImportError:
    print("Error: numpy library is required. Install it with: pip install numpy")
    sys.exit(1)

from .constants import MIDI_NOTENUMBERS
from .descriptor import SampleDescriptor, note_frequency
from .errors import SampleLoadError
from .loader import SamplerEngine

# ffmpeg is only required for compressed (.wv) samples
# Import it conditionally when needed
_ffmpeg_available = None


def _check_ffmpeg():
    """
    Checks if ffmpeg-python is available.
    Returns True if available, False otherwise.
    """
    global _ffmpeg_available
    if _ffmpeg_available is None:
        try:
            import ffmpeg
            _ffmpeg_available = True
        except ImportError:
            _ffmpeg_available = False
    return _ffmpeg_available


@dataclass(eq=False)
class KeyMappedSampleBuffer:
    """
    PCM data of one region, shaped (channels, frames), with its playback
    bounds in sample frames.
    """
    descriptor: SampleDescriptor
    data: np.ndarray
    sample_rate: float
    start_point: float
    end_point: float
    is_looping: bool
    loop_start_point: float
    loop_end_point: float

    @property
    def channel_count(self):
        return self.data.shape[0]

    @property
    def sample_count(self):
        return self.data.shape[1]

    @property
    def note_number(self):
        return self.descriptor.note_number

    @property
    def minimum_note_number(self):
        return self.descriptor.minimum_note_number

    @property
    def maximum_note_number(self):
        return self.descriptor.maximum_note_number

    @property
    def minimum_velocity(self):
        return self.descriptor.minimum_velocity

    @property
    def maximum_velocity(self):
        return self.descriptor.maximum_velocity


class KeyMappedSampler(SamplerEngine):
    """
    In-memory sampler engine with a 128-note key map.
    """

    def __init__(self):
        self.sample_buffers = []
        self.key_map = [[] for _ in range(MIDI_NOTENUMBERS)]
        self.tuning_table = np.array([note_frequency(nn) for nn in range(MIDI_NOTENUMBERS)])
        self.is_key_map_valid = False

    def load_sample_data(self, descriptor, data, sample_rate):
        """
        Stores PCM data for a descriptor.

        Args:
            descriptor: The SampleDescriptor of the region.
            data: Samples shaped (frames,) or (frames, channels).
            sample_rate: Sample rate in Hz.

        Returns:
            The new KeyMappedSampleBuffer.
        """
        data = np.asarray(data, dtype=np.float32)
        if data.ndim == 1:
            data = data[np.newaxis, :]
        else:
            data = data.T
        data = np.ascontiguousarray(data)
        sample_count = data.shape[1]
        last_frame = float(sample_count - 1)

        start_point = descriptor.start_point if descriptor.start_point > 0.0 else 0.0
        end_point = descriptor.end_point if descriptor.end_point > 0.0 else last_frame

        # A loop end of 0 means "not set"
        loop_end = descriptor.loop_end_point if descriptor.loop_end_point != 0.0 else last_frame
        loop_start_point = 0.0
        loop_end_point = last_frame

        if descriptor.is_looping:
            # Values above 1.0 are frame offsets, 0.0-1.0 are fractions of the end point
            loop_start = descriptor.loop_start_point
            loop_start_point = loop_start if loop_start > 1.0 else end_point * loop_start
            loop_end_point = loop_end if loop_end > 1.0 else end_point * loop_end

            loop_start_point = max(loop_start_point, start_point)
            loop_end_point = min(loop_end_point, end_point)

        buffer = KeyMappedSampleBuffer(
            descriptor=descriptor,
            data=data,
            sample_rate=float(sample_rate),
            start_point=start_point,
            end_point=end_point,
            is_looping=descriptor.is_looping,
            loop_start_point=loop_start_point,
            loop_end_point=loop_end_point,
        )
        self.sample_buffers.append(buffer)
        return buffer

    def load_audio_file(self, descriptor, audio_file):
        """
        Loads PCM from an open soundfile.SoundFile.
        """
        data = audio_file.read(dtype="float32", always_2d=True)
        return self.load_sample_data(descriptor, data, audio_file.samplerate)

    def load_compressed_sample_file(self, descriptor, path):
        """
        Decodes a compressed sample file (WavPack) with ffmpeg.

        Args:
            descriptor: The SampleDescriptor of the region.
            path: The path to the sample file.

        Returns:
            The new KeyMappedSampleBuffer.
        """
        if not _check_ffmpeg():
            raise SampleLoadError(
                "ffmpeg-python library is required for decoding compressed samples.\n"
                "Install it with: pip install ffmpeg-python\n"
                "FFmpeg must also be installed on your system."
            )

        import ffmpeg

        try:
            probe = ffmpeg.probe(path)
            streams = [s for s in probe["streams"] if s.get("codec_type") == "audio"]
            if not streams:
                raise SampleLoadError(f"No audio stream in \"{path}\"")
            channels = int(streams[0]["channels"])
            sample_rate = int(streams[0]["sample_rate"])

            out, _ = (
                ffmpeg
                .input(path)
                .output("pipe:", format="f32le", acodec="pcm_f32le")
                .run(capture_stdout=True, capture_stderr=True, quiet=True)
            )
        except ffmpeg.Error as e:
            stderr_text = e.stderr.decode(errors="replace") if e.stderr else "Unknown error"
            raise SampleLoadError(f"ffmpeg failed to decode \"{path}\": {stderr_text}") from e
        except OSError as e:
            raise SampleLoadError(f"Failed to run ffmpeg for \"{path}\": {e}") from e

        data = np.frombuffer(out, dtype="<f4").reshape(-1, channels)
        return self.load_sample_data(descriptor, data, sample_rate)

    def unload_all_samples(self):
        self.is_key_map_valid = False
        self.sample_buffers.clear()
        for entry in self.key_map:
            entry.clear()

    def set_note_frequency(self, note_number, frequency):
        self.tuning_table[note_number] = frequency

    def build_key_map(self):
        """
        Maps each note to every buffer whose note range contains it.

        Ranges are compared in Hz against the tuning table.
        """
        self.is_key_map_valid = False
        for entry in self.key_map:
            entry.clear()

        for buffer in self.sample_buffers:
            min_freq = note_frequency(buffer.minimum_note_number)
            max_freq = note_frequency(buffer.maximum_note_number)
            mask = (self.tuning_table >= min_freq) & (self.tuning_table <= max_freq)
            for nn in np.flatnonzero(mask):
                self.key_map[nn].append(buffer)

        self.is_key_map_valid = True

    def build_simple_key_map(self):
        """
        Maps each note to the buffers whose key center is closest in pitch,
        ignoring the note ranges.
        """
        self.is_key_map_valid = False
        for entry in self.key_map:
            entry.clear()

        if self.sample_buffers:
            centers = np.array([note_frequency(b.note_number) for b in self.sample_buffers])
            for nn, note_freq in enumerate(self.tuning_table):
                distances = np.abs(centers - note_freq)
                nearest = distances.min()
                for buffer, distance in zip(self.sample_buffers, distances):
                    if distance == nearest:
                        self.key_map[nn].append(buffer)

        self.is_key_map_valid = True

    def lookup_samples(self, note_number, velocity):
        """
        Returns the buffers mapped to a note whose velocity range contains
        `velocity`.
        """
        return [
            buffer for buffer in self.key_map[note_number]
            if buffer.minimum_velocity <= velocity <= buffer.maximum_velocity
        ]
