import time

import cv2
import numpy as np

from repcoach.config import config
from repcoach.models.schemas import WorkoutState
from repcoach.utils.logging_utils import logger


class DebugService:
    """
    Saves annotated frames while the service runs in "debug" mode.
    Overlays the angles, coaching message and rep count for the frame.
    """

    @staticmethod
    def overlay_lines(state: WorkoutState):
        lines = [
            f"Frame: {state.framesSent}",
            f"Reps: {state.repCount} ({state.phase})",
        ]
        for name, value in sorted(state.angles.items()):
            lines.append(f"{name.capitalize()}: {value:.1f}")
        if state.feedback:
            # cv2 fonts cannot render emoji
            lines.append(state.feedback.encode("ascii", "ignore").decode().strip())
        elif not state.detected:
            lines.append("no_person")
        return lines

    @staticmethod
    def save_debug_frame(img_bytes: bytes, state: WorkoutState):
        """
        Save annotated debug frame to disk if frame saving is enabled.
        """
        if not config.save_frames or not config.debug_dir:
            return

        try:
            nparr = np.frombuffer(img_bytes, np.uint8)
            img = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

            if img is None:
                return

            debug_img = img.copy()
            font = cv2.FONT_HERSHEY_SIMPLEX

            for i, text in enumerate(DebugService.overlay_lines(state)):
                y_pos = 40 + (i * 35)
                cv2.putText(debug_img, text, (10, y_pos), font, 0.8, (0, 255, 0), 2)

            timestamp = int(time.time())
            filename = f"frame_{state.framesSent:04d}_reps_{state.repCount}_{timestamp}.jpg"
            filepath = config.debug_dir / filename

            cv2.imwrite(str(filepath), debug_img)
            logger.debug(f"Debug frame saved: {filename}")

        except Exception as e:
            logger.error(f"Error saving debug frame: {e}")

# Global service instance
debug_service = DebugService()
