# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
SFZ Loader - Reads an SFZ file and feeds its regions to a sampler engine.

Each <group> line replaces the active GroupDefaults. Each <region> line is
resolved against them into a SampleDescriptor and dispatched by sample file
extension:
- .wv: engine.load_compressed_sample_file(descriptor, path)
- .aif / .wav: engine.load_audio_file(descriptor, audio_file)
- anything else: skipped

engine.build_key_map() is called once after the last line.
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path

try:
    import soundfile as sf
except ImportError:
    print("Error: soundfile library is required. Install it with: pip install soundfile")
    sys.exit(1)

from .constants import (
    AUDIO_FILE_EXTENSIONS,
    COMPRESSED_EXTENSIONS,
    DEFAULT_ENCODING,
    GROUP_OPCODES,
    REGION_OPCODES,
)
from .descriptor import (
    GroupDefaults,
    RegionOverrides,
    SampleFileDescriptor,
    resolve_descriptor,
)
from .errors import SampleLoadError, SFZReadError
from .parser import (
    Directive,
    classify_directive,
    iter_lines,
    parse_float,
    parse_int,
    parse_midi_value,
    split_sample,
    tokenize_opcodes,
)

logger = logging.getLogger(__name__)


class SamplerEngine(ABC):
    """
    The calls an SFZ load makes on a sampler.
    """

    @abstractmethod
    def load_compressed_sample_file(self, descriptor, path):
        """Loads a compressed (.wv) sample file for the descriptor."""

    @abstractmethod
    def load_audio_file(self, descriptor, audio_file):
        """Loads PCM from an already opened audio file for the descriptor."""

    @abstractmethod
    def build_key_map(self):
        """Rebuilds the note/velocity lookup after samples were loaded."""


def resolve_sample_path(base_dir, sample):
    """
    Resolves a sample path relative to the directory of the SFZ file.

    Backslash separators are converted to forward slashes first.
    An empty sample yields an empty path.
    """
    if not sample:
        return ""
    return str(Path(base_dir) / sample.replace("\\", "/"))


def _note_updates(key, value):
    """
    Field updates for the note opcodes shared by <group> and <region>.
    """
    note = parse_midi_value(value).value
    if key == "key":
        return {"note_number": note, "low_note": note, "high_note": note}
    if key == "pitch_keycenter":
        return {"note_number": note}
    if key == "lokey":
        return {"low_note": note}
    if key == "hikey":
        return {"high_note": note}
    return {}


class SFZLoader:
    """
    Loads SFZ files into a SamplerEngine.
    """

    def __init__(self, engine, strict=False, encoding=DEFAULT_ENCODING, open_audio_file=None):
        """
        Initializes the SFZ Loader.

        Args:
            engine: The SamplerEngine receiving the regions.
            strict: Abort the whole load when a sample file cannot be opened
                instead of skipping that region.
            encoding: Text encoding of the SFZ file.
            open_audio_file: Callable opening an audio file for reading and
                returning a context manager (default: soundfile.SoundFile).
        """
        self.engine = engine
        self.strict = strict
        self.encoding = encoding
        self.open_audio_file = open_audio_file or sf.SoundFile

    def load(self, sfz_path):
        """
        Loads every region of an SFZ file into the engine.

        Args:
            sfz_path: Path to the .sfz file.

        Returns:
            List of SampleFileDescriptor for the regions handed to the engine,
            in file order.
        """
        sfz_path = Path(sfz_path)
        try:
            text = sfz_path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not load SFZ: %s", e)
            raise SFZReadError(f"Could not load SFZ \"{sfz_path}\": {e}") from e

        base_dir = sfz_path.parent
        group = GroupDefaults()
        loaded = []

        for line in iter_lines(text):
            directive, rest = classify_directive(line)
            if directive is Directive.GROUP:
                group = self.parse_group(rest)
            elif directive is Directive.REGION:
                region = self.parse_region(rest)
                descriptor = resolve_descriptor(group, region)
                path = resolve_sample_path(base_dir, region.sample)
                result = self.dispatch(descriptor, path)
                if result is not None:
                    loaded.append(result)
            else:
                logger.debug("Ignoring line: %s", line)

        self.engine.build_key_map()
        return loaded

    def parse_group(self, text):
        """
        Builds the GroupDefaults for a <group> line.

        Every group starts from the defaults; nothing is inherited from the
        previous group.
        """
        group = GroupDefaults()
        for key, value in tokenize_opcodes(text):
            if key not in GROUP_OPCODES:
                continue
            if key == "tune":
                group = replace(group, tune=parse_int(value).value)
            elif key == "volume":
                group = replace(group, gain=parse_float(value).value)
            elif key == "pan":
                group = replace(group, pan=parse_float(value).value)
            else:
                group = replace(group, **_note_updates(key, value))
        return group

    def parse_region(self, text):
        """
        Collects the RegionOverrides of a <region> line.
        """
        region = RegionOverrides()
        text, sample = split_sample(text)
        if sample is not None:
            region.sample = sample

        for key, value in tokenize_opcodes(text):
            if key not in REGION_OPCODES:
                continue
            if key == "lovel":
                region.low_velocity = parse_midi_value(value).value
            elif key == "hivel":
                region.high_velocity = parse_midi_value(value).value
            elif key == "loop_mode":
                region.loop_mode = value
            elif key == "loop_start":
                region.loop_start = parse_float(value).value
            elif key == "loop_end":
                region.loop_end = parse_float(value).value
            elif key == "start":
                region.start = parse_float(value).value
            elif key == "end":
                region.end = parse_float(value).value
            elif key == "tune":
                region.tune = parse_int(value).value
            elif key == "volume":
                region.gain = parse_float(value).value
            elif key == "pan":
                region.pan = parse_float(value).value
            else:
                for name, note in _note_updates(key, value).items():
                    setattr(region, name, note)
        return region

    def dispatch(self, descriptor, path):
        """
        Hands a descriptor to the engine loader matching its file extension.

        Args:
            descriptor: The resolved SampleDescriptor.
            path: The resolved sample path (may be empty).

        Returns:
            A SampleFileDescriptor if a loader was called, otherwise None.
        """
        if path.endswith(COMPRESSED_EXTENSIONS):
            try:
                self.engine.load_compressed_sample_file(descriptor, path)
            except SampleLoadError as e:
                return self._sample_failed(path, e)
        elif path.endswith(AUDIO_FILE_EXTENSIONS):
            try:
                with self.open_audio_file(path) as audio_file:
                    self.engine.load_audio_file(descriptor, audio_file)
            except (OSError, RuntimeError, SampleLoadError) as e:
                # libsndfile errors are RuntimeError subclasses
                return self._sample_failed(path, e)
        else:
            logger.debug("Skipping region with unsupported sample: \"%s\"", path)
            return None

        logger.info(
            "load %d %.3f NN range %d-%d vel %d-%d %s",
            descriptor.note_number,
            descriptor.note_frequency,
            descriptor.minimum_note_number,
            descriptor.maximum_note_number,
            descriptor.minimum_velocity,
            descriptor.maximum_velocity,
            path,
        )
        return SampleFileDescriptor(descriptor, path)

    def _sample_failed(self, path, error):
        if self.strict:
            raise SampleLoadError(f"Could not load sample \"{path}\": {error}") from error
        logger.warning("Skipping region, could not load sample \"%s\": %s", path, error)
        return None


def load_sfz(engine, sfz_path, **options):
    """
    Loads an SFZ file into a sampler engine.

    Args:
        engine: The SamplerEngine receiving the regions.
        sfz_path: Path to the .sfz file.
        **options: Passed to SFZLoader (strict, encoding, open_audio_file).

    Returns:
        List of SampleFileDescriptor handed to the engine.
    """
    return SFZLoader(engine, **options).load(sfz_path)


def load_sfz_from(engine, directory, file_name, **options):
    """
    Loads the SFZ file `file_name` found in `directory`.
    """
    return load_sfz(engine, Path(directory) / file_name, **options)
