import argparse
import os
from pathlib import Path
from typing import Dict, Optional, Sequence


def _default_api_base() -> str:
    """Session store base URL, taken from the environment when set."""
    env_base = os.environ.get("REPCOACH_API_BASE_URL") or os.environ.get("REPCOACH_API_URL")
    if env_base:
        return env_base.rstrip("/")
    return "http://localhost:5000"


class Config:
    """
    Central configuration manager for the RepCoach engine.
    Handles command-line argument parsing, debug modes, session store access
    and per-exercise counting parameters.
    """

    def __init__(self):
        # Application mode settings
        self.debug_mode: str = "debug_no_save"
        self.save_frames: bool = False
        self.debug_dir: Optional[Path] = None

        # HTTP service settings
        self.host: str = "0.0.0.0"
        self.port: int = 8000

        # Remote session store
        self.api_base_url: str = _default_api_base()
        self.session_route: str = "/session"
        self.workout_route: str = "/workout"
        self.request_timeout: float = 2.0  # Seconds before a store request counts as failed

        # Duration accounting
        self.tick_interval: float = 1.0

        # Pose detection thresholds
        self.min_confidence: float = 0.3  # Minimum keypoint confidence required
        self.model_conf_threshold: float = 0.4  # YOLO model confidence threshold
        self.model_path: str = "yolov8n-pose.pt"

        # Image processing settings
        self.image_width_limit: int = 640  # Resize images larger than this for performance

        # Repetition thresholds in degrees of the primary angle
        self.thresholds: Dict[str, Dict[str, float]] = {
            "squat": {"up": 150.0, "down": 110.0},
            "pushup": {"up": 160.0, "down": 90.0},
        }

        # Exercise mode configuration
        self.supported_modes = ["squat", "pushup"]

        # Human-readable descriptions for each debug mode
        self.mode_descriptions = {
            "debug": "Debug Mode (with frame saving)",
            "debug_no_save": "Debug Mode (without frame saving)",
            "non_debug": "Non-Debug Mode (minimal logging)"
        }

    def setup_from_args(self, argv: Optional[Sequence[str]] = None):
        """
        Parse command line arguments and configure application settings.
        Creates debug directory if frame saving is enabled.
        """
        parser = argparse.ArgumentParser(description="RepCoach workout engine")
        parser.add_argument(
            "--mode",
            choices=list(self.mode_descriptions),
            default="debug_no_save",
            help="Debug mode setting"
        )
        parser.add_argument("--api-base", default=None, help="Session store base URL")
        parser.add_argument("--host", default=self.host)
        parser.add_argument("--port", type=int, default=self.port)
        args = parser.parse_args(argv)

        self.debug_mode = args.mode
        self.save_frames = (self.debug_mode == "debug")
        self.host = args.host
        self.port = args.port
        if args.api_base:
            self.api_base_url = args.api_base.rstrip("/")

        # Create debug frame directory if needed
        if self.save_frames:
            self.debug_dir = Path("debug_frames")
            self.debug_dir.mkdir(exist_ok=True)

    def thresholds_for(self, mode: str) -> Dict[str, float]:
        return self.thresholds[mode]

    @property
    def mode_description(self) -> str:
        """Get human-readable description of current mode"""
        return self.mode_descriptions[self.debug_mode]

# Global configuration instance - import this in other modules
config = Config()
