"""Raw sample sources: zero-argument callables returning the current color."""

from __future__ import annotations

import csv
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Optional, Union

from rvr_color.core.logging_utils import get_module_logger

from .color_types import Color, ColorLike
from .errors import SampleSourceError

logger = get_module_logger(__name__)

SampleSource = Callable[[], ColorLike]

CSV_COLUMNS = ("r", "g", "b")


def missing_sample_source() -> Color:
    """Stand-in used until a real sample function is wired in; always fails."""
    raise SampleSourceError(
        "No sample source is wired in. Pass a zero-argument function returning the "
        "sensor's current color (e.g. the robot's getColor built-in, or a fake in tests) "
        "to the controller."
    )


class SequenceSampleSource:
    """Replays recorded samples in order.

    Once exhausted it keeps returning ``fallback`` when one is given, otherwise
    the last recorded sample.
    """

    def __init__(self, samples: Iterable[ColorLike], *, fallback: Optional[ColorLike] = None) -> None:
        self._samples = [Color.coerce(sample) for sample in samples]
        if not self._samples and fallback is None:
            raise ValueError("a sample sequence needs at least one sample or a fallback")
        self._fallback = Color.coerce(fallback) if fallback is not None else None
        self._index = 0

    def __call__(self) -> Color:
        if self._index < len(self._samples):
            sample = self._samples[self._index]
            self._index += 1
            return sample
        self._index += 1
        if self._fallback is not None:
            return self._fallback
        return self._samples[-1]

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def calls(self) -> int:
        """Number of samples served so far, including fallback samples."""
        return self._index

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._samples)

    def rewind(self) -> None:
        self._index = 0


def load_samples_csv(path: Union[str, Path]) -> list[Color]:
    """Read ``r,g,b`` rows (with a header row) from a CSV file."""
    csv_path = Path(path)
    samples: list[Color] = []
    with open(csv_path, "r", encoding="utf-8", newline="") as fh:
        reader = csv.DictReader(fh)
        missing = [column for column in CSV_COLUMNS if column not in (reader.fieldnames or ())]
        if missing:
            raise SampleSourceError(f"{csv_path} is missing column(s): {', '.join(missing)}")
        for line_no, row in enumerate(reader, start=2):
            try:
                samples.append(Color(int(row["r"]), int(row["g"]), int(row["b"])))
            except (TypeError, ValueError) as exc:
                raise SampleSourceError(f"{csv_path}:{line_no}: invalid sample {row!r}") from exc
    logger.debug("Loaded %d samples from %s", len(samples), csv_path)
    return samples


__all__ = [
    "CSV_COLUMNS",
    "SampleSource",
    "SequenceSampleSource",
    "load_samples_csv",
    "missing_sample_source",
]
