"""Focus state for the place detail panel."""
import logging
from typing import Container, Optional

logger = logging.getLogger(__name__)


class SelectionState:
    """
    Two-state machine: unfocused, or focused on one resolved place.

    Only the place identifier is held here; place details stay with the
    reconciler so the panel and the marker set read the same data.

    Tapping a marker focuses its place (switching directly from any prior
    focus); an explicit dismiss or a long enough downward drag of the
    panel returns to unfocused.
    """

    DRAG_DISMISS_THRESHOLD = 150
    DRAG_EXPAND_THRESHOLD = -50

    def __init__(self):
        self._identifier: Optional[str] = None
        self.expanded = False

    @property
    def focused_identifier(self) -> Optional[str]:
        return self._identifier

    @property
    def is_focused(self) -> bool:
        return self._identifier is not None

    def select(self, identifier: str, places: Container[str]) -> bool:
        """
        Focus the place for a tapped marker.

        Args:
            identifier: Place identifier from the marker
            places: Identifiers of currently resolved places

        Returns:
            True if focus changed, False if the identifier has no resolved place
        """
        if identifier not in places:
            logger.debug(f"Ignoring selection of unresolved place {identifier}")
            return False

        self._identifier = identifier
        self.expanded = False
        return True

    def dismiss(self) -> bool:
        """Clear focus. Returns False when nothing was focused."""
        if self._identifier is None:
            return False
        self._identifier = None
        self.expanded = False
        return True

    def drag_ended(self, vertical_translation: float) -> bool:
        """
        Apply the end of a drag gesture on the detail panel.

        Args:
            vertical_translation: Drag distance in points, positive downward

        Returns:
            True if the gesture dismissed the panel
        """
        if self._identifier is None:
            return False

        if vertical_translation > self.DRAG_DISMISS_THRESHOLD:
            return self.dismiss()

        self.expanded = vertical_translation < self.DRAG_EXPAND_THRESHOLD
        return False
