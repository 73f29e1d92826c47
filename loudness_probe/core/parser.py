"""Parsing of bs1770gain XML output.

bs1770gain with ``--xml`` prints a document like::

    <bs1770gain>
      <album>
        <track total="1" number="1" file="audio&#x2E;mp3">
          <integrated lufs="-16.32" lu="-6.68" />
          <momentary lufs="-10.02" lu="-12.98" />
          <shortterm-maximum lufs="-13.40" lu="-9.60" />
          <range lufs="2.53" />
          <true-peak tpfs="-0.23" factor="0.974183" />
        </track>
        <summary total="1">
          <integrated lufs="-16.32" lu="-6.68" />
          <range lufs="2.53" />
          <true-peak tpfs="-0.23" factor="0.974183" />
        </summary>
      </album>
    </bs1770gain>

Only the first track is read. The summary and any further tracks are ignored.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional

from loudness_probe.exceptions import LoudnessParseError

ROOT_TAG = "bs1770gain"
ALBUM_TAG = "album"
TRACK_TAG = "track"

# metric element -> value attribute
INTEGRATED = ("integrated", "lufs")
MOMENTARY = ("momentary", "lufs")
SHORTTERM_MAXIMUM = ("shortterm-maximum", "lufs")
RANGE = ("range", "lufs")
TRUE_PEAK = ("true-peak", "tpfs")


@dataclass(frozen=True)
class LoudnessMetrics:
    """Loudness values of one track element."""

    integrated: float
    range: float
    true_peak: float
    momentary: Optional[float] = None
    shortterm_maximum: Optional[float] = None


def parse_loudness_xml(text: str, include_maxima: bool = False) -> LoudnessMetrics:
    """Parse bs1770gain XML output into loudness metrics.

    Args:
        text: XML captured from bs1770gain's stdout
        include_maxima: Whether momentary and shortterm-maximum are required

    Returns:
        LoudnessMetrics of the first track

    Raises:
        LoudnessParseError: If the document is malformed or lacks a required element
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise LoudnessParseError(f"Cannot parse loudness information: {e}") from e

    if root.tag != ROOT_TAG:
        raise LoudnessParseError(
            f"Cannot parse loudness information: expected <{ROOT_TAG}> root, got <{root.tag}>"
        )

    album = _child(root, ALBUM_TAG)
    track = _child(album, TRACK_TAG)

    momentary = None
    shortterm_maximum = None
    if include_maxima:
        momentary = _metric(track, MOMENTARY)
        shortterm_maximum = _metric(track, SHORTTERM_MAXIMUM)

    return LoudnessMetrics(
        integrated=_metric(track, INTEGRATED),
        range=_metric(track, RANGE),
        true_peak=_metric(track, TRUE_PEAK),
        momentary=momentary,
        shortterm_maximum=shortterm_maximum,
    )


def _child(parent: ET.Element, tag: str) -> ET.Element:
    # find() returns the first match, later siblings are never looked at
    element = parent.find(tag)
    if element is None:
        raise LoudnessParseError(
            f"Cannot parse loudness information: <{parent.tag}> has no <{tag}> element"
        )
    return element


def _metric(track: ET.Element, metric: tuple[str, str]) -> float:
    tag, attribute = metric
    element = _child(track, tag)

    raw = element.get(attribute)
    if raw is None:
        raise LoudnessParseError(
            f"Cannot parse loudness information: <{tag}> has no '{attribute}' attribute"
        )
    try:
        return float(raw)
    except ValueError as e:
        raise LoudnessParseError(
            f"Cannot parse loudness information: <{tag} {attribute}={raw!r}> is not a number"
        ) from e
