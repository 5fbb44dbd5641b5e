"""Membership tests of colors against tolerance regions."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional, Union

from .color_types import Color, ColorLike, ColorSpec, ToleranceChannel

SpecLike = Union[ColorSpec, "BoundColorSpec", Mapping[str, Any]]


def as_region(spec: SpecLike) -> ColorSpec:
    if isinstance(spec, BoundColorSpec):
        return spec.region
    if isinstance(spec, ColorSpec):
        return spec
    return ColorSpec.from_mapping(spec)


def is_match(spec: SpecLike, color: ColorLike) -> bool:
    """True iff every channel of ``color`` lies in the spec's inclusive range."""
    return as_region(spec).contains(Color.coerce(color))


class BoundColorSpec:
    """A ColorSpec handed out by a controller.

    ``spec_id`` is the handle the controller's event registry keys handlers
    on; two bound specs with equal regions are still distinct registrations.
    """

    __slots__ = ("_spec_id", "_region", "_read_color", "_register")

    def __init__(
        self,
        spec_id: int,
        region: ColorSpec,
        read_color: Callable[[], Color],
        register: Callable[["BoundColorSpec", Any], None],
    ) -> None:
        self._spec_id = spec_id
        self._region = region
        self._read_color = read_color
        self._register = register

    @property
    def spec_id(self) -> int:
        return self._spec_id

    @property
    def region(self) -> ColorSpec:
        return self._region

    @property
    def r(self) -> ToleranceChannel:
        return self._region.r

    @property
    def g(self) -> ToleranceChannel:
        return self._region.g

    @property
    def b(self) -> ToleranceChannel:
        return self._region.b

    def is_match(self, color: Optional[ColorLike] = None) -> bool:
        """Test ``color``, or the controller's current stable color when omitted.

        Without a color this reads the stable color, which takes a fresh
        sample when the controller samples on demand.
        """
        target = self._read_color() if color is None else Color.coerce(color)
        return self._region.contains(target)

    def when_matches(self, handler: Any = None) -> None:
        """Register ``handler(done, color, spec)``; a non-callable clears all handlers."""
        self._register(self, handler)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return self._region.to_dict()

    def __repr__(self) -> str:
        return f"BoundColorSpec(id={self._spec_id}, {self._region.to_dict()})"


__all__ = ["BoundColorSpec", "SpecLike", "as_region", "is_match"]
