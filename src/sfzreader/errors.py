# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.


class SFZError(Exception):
    """Base error for sfzreader."""


class SFZReadError(SFZError):
    """Raised when an SFZ file cannot be read or decoded."""


class SampleLoadError(SFZError):
    """Raised when a sample file cannot be opened or decoded."""
