# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Command-line interface for sfzreader.

Provides subcommands:
- inspect: print the resolved sample descriptors of an SFZ file
- keymap: load an SFZ file and print which samples each note triggers

This module exposes small entry functions that can be used as console_scripts
entry points (they must be callables taking no arguments).
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from .constants import DEFAULT_ENCODING
from .loader import SamplerEngine, SFZLoader
from .sampler import KeyMappedSampler


class _DescriptorCollector(SamplerEngine):
    """
    Engine that accepts every region without reading audio.
    """

    def load_compressed_sample_file(self, descriptor, path):
        pass

    def load_audio_file(self, descriptor, audio_file):
        pass

    def build_key_map(self):
        pass


def _build_root_parser():
    p = argparse.ArgumentParser(prog="sfzreader", description="sfzreader command-line tool")
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug messages")
    sub = p.add_subparsers(dest="command", required=True)

    c_inspect = sub.add_parser("inspect", help="Print the sample descriptors of an SFZ file")
    c_inspect.add_argument("sfz_file", help="Input SFZ file path")
    c_inspect.add_argument("--json", action="store_true", help="Print descriptors as JSON")
    c_inspect.add_argument("--encoding", default=DEFAULT_ENCODING, help=f"Text encoding of the SFZ file (default: {DEFAULT_ENCODING})")

    c_keymap = sub.add_parser("keymap", help="Load an SFZ file and print its key map")
    c_keymap.add_argument("sfz_file", help="Input SFZ file path")
    c_keymap.add_argument("-s", "--strict", action="store_true", help="Abort when a sample file cannot be loaded instead of skipping it")
    c_keymap.add_argument("--encoding", default=DEFAULT_ENCODING, help=f"Text encoding of the SFZ file (default: {DEFAULT_ENCODING})")

    return p


def _inspect(args):
    loader = SFZLoader(_DescriptorCollector(), encoding=args.encoding, open_audio_file=contextlib.nullcontext)
    loaded = loader.load(args.sfz_file)

    if args.json:
        records = [{"path": f.path, **asdict(f.descriptor)} for f in loaded]
        print(json.dumps(records, indent=2))
        return

    for f in loaded:
        d = f.descriptor
        print(
            f"{Path(f.path).name}: key {d.note_number} ({d.note_frequency:.2f} Hz) "
            f"notes {d.minimum_note_number}-{d.maximum_note_number} "
            f"vel {d.minimum_velocity}-{d.maximum_velocity} "
            f"tune {d.tune} gain {d.gain:g} pan {d.pan:g}"
            + (f" loop {d.loop_start_point:g}-{d.loop_end_point:g}" if d.is_looping else "")
        )
    print(f"{len(loaded)} region(s)")


def _keymap(args):
    sampler = KeyMappedSampler()
    loader = SFZLoader(sampler, strict=args.strict, encoding=args.encoding)
    loaded = loader.load(args.sfz_file)

    names = {id(b): Path(f.path).name for b, f in zip(sampler.sample_buffers, loaded)}
    for nn, buffers in enumerate(sampler.key_map):
        if not buffers:
            continue
        entries = ", ".join(
            f"{names[id(b)]} [vel {b.minimum_velocity}-{b.maximum_velocity}]" for b in buffers
        )
        print(f"{nn:3d}: {entries}")
    print(f"{len(sampler.sample_buffers)} sample(s) loaded")


def main(argv=None):
    """
    Generic entry point for `python -m sfzreader` or package-level CLI.

    Returns exit code (0 on success).
    """
    argv = list(argv) if argv is not None else None
    parser = _build_root_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        if args.command == "inspect":
            _inspect(args)
        elif args.command == "keymap":
            _keymap(args)
        else:
            parser.print_help()
            return 2
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
