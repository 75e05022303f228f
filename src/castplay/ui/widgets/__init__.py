"""Reusable UI widgets."""

from castplay.ui.widgets.seek_slider import SeekSlider, fraction_from_position

__all__ = ["SeekSlider", "fraction_from_position"]
