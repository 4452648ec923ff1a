from typing import Dict, Optional

import cv2
import numpy as np
from ultralytics import YOLO

from repcoach.config import config
from repcoach.models.landmarks import Landmark, landmarks_from_keypoints
from repcoach.utils.logging_utils import logger


class PoseService:
    """
    YOLO-based pose detector feeding the workout engine.
    Turns an image into a named landmark frame in normalized coordinates.
    """

    def __init__(self):
        self.model = None

    async def initialize(self):
        """
        Load the YOLO pose model and run one warm-up inference.
        """
        logger.info(f"Loading YOLO pose model {config.model_path}...")
        self.model = YOLO(config.model_path)

        # Warm up model with dummy inference to optimize subsequent calls
        dummy = np.zeros((480, 640, 3), dtype=np.uint8)
        _ = self.model(dummy, verbose=False)

        logger.info("Pose model loaded successfully!")

    def detect_pose(self, img: np.ndarray) -> Dict[str, Optional[Landmark]]:
        """
        Detect the first person in the image.
        Joints that were not found, or the whole body when nobody was found, come back as None.
        """
        if not self.model:
            raise RuntimeError("Model not initialized")

        # Resize large images for performance while maintaining aspect ratio
        height, width = img.shape[:2]
        if width > config.image_width_limit:
            scale = config.image_width_limit / width
            img = cv2.resize(img, (int(width * scale), int(height * scale)))
            height, width = img.shape[:2]

        results = self.model(img, verbose=False, conf=config.model_conf_threshold)

        keypoints = None
        if results[0].keypoints is not None and len(results[0].keypoints.data) > 0:
            keypoints = results[0].keypoints.data[0].cpu().numpy()

        return landmarks_from_keypoints(keypoints, (width, height), config.min_confidence)

# Global service instance
pose_service = PoseService()
