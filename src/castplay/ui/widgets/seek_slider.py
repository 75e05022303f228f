"""Progress slider that seeks on drag and on tap."""

from PySide6.QtCore import QRect, Qt, Signal
from PySide6.QtGui import QMouseEvent
from PySide6.QtWidgets import QSlider, QStyle, QStyleOptionSlider, QWidget

from castplay.ui.tokens import seek, sizing


def fraction_from_position(x: float, width: float) -> float:
    """Map an x offset inside the slider to a fraction of its width.

    Args:
        x: Horizontal position relative to the slider's left edge.
        width: Slider width.

    Returns:
        Fraction clamped to [0, 1]; 0 for a zero-width slider.
    """
    if width <= 0:
        return 0.0
    return min(1.0, max(0.0, x / width))


class SeekSlider(QSlider):
    """Horizontal slider over [0, 1] with tap-to-seek on the groove.

    Example:
        slider = SeekSlider()
        slider.tapped.connect(lambda f: print(f"Seek to {f:.0%}"))
        slider.set_fraction(0.25)
    """

    tapped = Signal(float)  # Fraction 0.0-1.0 under the click

    def __init__(self, parent: QWidget | None = None) -> None:
        """Initialize the slider."""
        super().__init__(Qt.Orientation.Horizontal, parent)
        self.setRange(0, seek.resolution)
        self.setFixedHeight(sizing.controls_height)

    @property
    def fraction(self) -> float:
        """Return the handle position as a fraction."""
        return self.value() / self.maximum()

    def set_fraction(self, fraction: float) -> None:
        """Move the handle without emitting ``sliderMoved``."""
        self.setValue(round(min(1.0, max(0.0, fraction)) * self.maximum()))

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """Jump the handle to a groove click before normal handling."""
        if event.button() == Qt.MouseButton.LeftButton:
            point = event.position().toPoint()
            if not self._handle_rect().contains(point):
                fraction = fraction_from_position(event.position().x(), self.width())
                self.set_fraction(fraction)
                self.tapped.emit(fraction)
        super().mousePressEvent(event)

    def _handle_rect(self) -> QRect:
        """Return the handle's current geometry."""
        option = QStyleOptionSlider()
        self.initStyleOption(option)
        return self.style().subControlRect(
            QStyle.ComplexControl.CC_Slider, option, QStyle.SubControl.SC_SliderHandle, self
        )
