# landmarks.py
"""
Named 2D body-joint positions for a single frame.
Joint names follow the COCO 17-keypoint layout used by the YOLO pose model.
"""

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class Landmark:
    """One detected joint in normalized image coordinates. z and visibility are informational."""
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None

    def is_valid(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


# joint name -> Landmark, or None when the detector missed the joint
LandmarkFrame = Mapping[str, Optional[Landmark]]

COCO_KEYPOINTS = (
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
)


def vertical_reference(point: Landmark, offset: float = 0.1) -> Landmark:
    """Synthetic landmark straight above `point` (image y grows downward)."""
    return Landmark(x=point.x, y=point.y - offset)


def landmarks_from_keypoints(
    keypoints: Optional[np.ndarray],
    image_size: Sequence[int],
    min_confidence: float = 0.3,
) -> Dict[str, Optional[Landmark]]:
    """
    Convert a YOLO keypoint array of shape (17, 3) [x_px, y_px, conf] into a
    named frame. Keypoints under min_confidence are reported as absent.
    """
    frame: Dict[str, Optional[Landmark]] = {name: None for name in COCO_KEYPOINTS}
    if keypoints is None or len(keypoints) == 0:
        return frame

    width, height = image_size
    for name, kp in zip(COCO_KEYPOINTS, keypoints):
        conf = float(kp[2]) if len(kp) > 2 else 1.0
        if conf < min_confidence:
            continue
        frame[name] = Landmark(x=float(kp[0]) / width, y=float(kp[1]) / height, visibility=conf)
    return frame
