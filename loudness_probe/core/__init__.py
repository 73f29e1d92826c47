"""Core loudness measurement modules."""

from loudness_probe.core.parser import LoudnessMetrics, parse_loudness_xml
from loudness_probe.core.probe import LoudnessProbe, compute_loudness, filtered_copy
from loudness_probe.core.report import DurationUnit, LoudnessReport, ProbeOptions

__all__ = [
    "LoudnessMetrics",
    "parse_loudness_xml",
    "LoudnessProbe",
    "compute_loudness",
    "filtered_copy",
    "DurationUnit",
    "LoudnessReport",
    "ProbeOptions",
]
