"""Player view: video area, play/pause button, progress slider and clocks."""

import logging

from PySide6.QtCore import QSize, Qt, Signal, Slot
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStyle,
    QVBoxLayout,
    QWidget,
)

from castplay.models.playback_state import Affordance
from castplay.ui.tokens import seek, sizing, spacing, typography
from castplay.ui.widgets.seek_slider import SeekSlider

logger = logging.getLogger(__name__)


class PlayerView(QWidget):
    """UI sink for playback progress and source of user intent.

    The play/pause button emits according to the affordance it shows,
    never according to the playback state.

    Example:
        view = PlayerView(video_widget)
        controller.connect_to_view(view)
        view.show()
    """

    play_pressed = Signal()
    pause_pressed = Signal()
    seek_requested = Signal(float)  # Fraction 0.0-1.0

    def __init__(self, video_widget: QWidget | None = None, parent: QWidget | None = None) -> None:
        """Initialize the view.

        Args:
            video_widget: Optional video surface shown above the controls.
            parent: Optional parent widget.
        """
        super().__init__(parent)
        self._affordance = Affordance.PLAY

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        if video_widget is not None:
            video_widget.setMinimumHeight(sizing.min_video_height)
            layout.addWidget(video_widget, stretch=1)

        controls = QHBoxLayout()
        controls.setContentsMargins(spacing.sm, spacing.sm, spacing.sm, spacing.sm)
        controls.setSpacing(spacing.md)

        self._button = QPushButton()
        self._button.setFixedSize(sizing.play_button, sizing.play_button)
        self._button.setIconSize(QSize(sizing.play_icon, sizing.play_icon))
        self._button.setStyleSheet(
            f"QPushButton {{ border-radius: {sizing.border_radius_button}px; }}"
        )
        self._button.clicked.connect(self._on_button_clicked)
        controls.addWidget(self._button)

        self._current_label = self._make_time_label(Qt.AlignmentFlag.AlignRight)
        controls.addWidget(self._current_label)

        self._slider = SeekSlider()
        self._slider.sliderMoved.connect(self._on_slider_moved)
        self._slider.tapped.connect(self.seek_requested)
        controls.addWidget(self._slider, stretch=1)

        self._total_label = self._make_time_label(Qt.AlignmentFlag.AlignLeft)
        controls.addWidget(self._total_label)

        layout.addLayout(controls)
        self.set_affordance(Affordance.PLAY)

    @staticmethod
    def _make_time_label(alignment: Qt.AlignmentFlag) -> QLabel:
        label = QLabel("0:00")
        label.setFixedWidth(sizing.time_label)
        label.setAlignment(alignment | Qt.AlignmentFlag.AlignVCenter)
        label.setStyleSheet(f"font-size: {typography.time_label}pt;")
        return label

    @property
    def affordance(self) -> Affordance:
        """Return what the button currently offers."""
        return self._affordance

    @property
    def play_button(self) -> QPushButton:
        """Return the play/pause button."""
        return self._button

    @property
    def slider(self) -> SeekSlider:
        """Return the progress slider."""
        return self._slider

    @property
    def progress(self) -> float:
        """Return the slider position as a fraction."""
        return self._slider.fraction

    @property
    def current_time_text(self) -> str:
        """Return the current-position clock text."""
        return self._current_label.text()

    @property
    def total_time_text(self) -> str:
        """Return the duration clock text."""
        return self._total_label.text()

    # UI sink

    @Slot(float)
    def set_progress(self, fraction: float) -> None:
        """Move the slider, unless the user is dragging it."""
        if self._slider.isSliderDown():
            return
        self._slider.set_fraction(fraction)

    @Slot(str, str)
    def set_times(self, current: str, total: str) -> None:
        """Update the clock labels."""
        self._current_label.setText(current)
        self._total_label.setText(total)

    @Slot(object)
    def set_affordance(self, affordance: Affordance) -> None:
        """Show the play or pause icon and rebind the button."""
        self._affordance = affordance
        pixmap = (
            QStyle.StandardPixmap.SP_MediaPlay
            if affordance is Affordance.PLAY
            else QStyle.StandardPixmap.SP_MediaPause
        )
        self._button.setIcon(self.style().standardIcon(pixmap))
        self._button.setAccessibleName(affordance.icon_name)
        self._button.setToolTip("Play" if affordance is Affordance.PLAY else "Pause")

    # Intent

    def _on_button_clicked(self) -> None:
        if self._affordance is Affordance.PLAY:
            self.play_pressed.emit()
        else:
            self.pause_pressed.emit()

    def _on_slider_moved(self, value: int) -> None:
        fraction = value / seek.resolution
        logger.debug("Slider dragged to %.3f", fraction)
        self.seek_requested.emit(fraction)
