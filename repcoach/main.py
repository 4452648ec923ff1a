# main.py
import time
from typing import Optional

import cv2
import numpy as np
from fastapi import FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from repcoach.config import config
from repcoach.errors import ConfigurationError
from repcoach.models.schemas import FrameRequest, StartRequest, WorkoutState, WorkoutSummary
from repcoach.services.debug_service import debug_service
from repcoach.services.pose_service import pose_service
from repcoach.services.workout_service import workout_service
from repcoach.utils.logging_utils import logger

app = FastAPI(title=f"RepCoach Workout Engine - {config.mode_description}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Credential from an "Authorization: Bearer <token>" header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@app.on_event("startup")
async def startup_event():
    """Load the pose model; JSON landmark frames keep working without it."""
    try:
        await pose_service.initialize()
    except Exception as e:
        logger.error(f"Pose model unavailable, /analyze_frame disabled: {e}")
    logger.info(f"Supported exercise modes: {config.supported_modes}")


@app.post("/workout/start", response_model=WorkoutState)
async def start_workout(request: StartRequest, authorization: Optional[str] = Header(None)):
    """Start a workout; the previous one, if any, is stopped first."""
    try:
        handle = workout_service.start(request.exercise, auth_token=bearer_token(authorization))
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return handle.state()


@app.post("/workout/frame", response_model=WorkoutState)
async def workout_frame(request: FrameRequest):
    """Feed one frame of named landmarks from an external detector."""
    state = workout_service.process_frame(request.to_frame())
    if state is None:
        raise HTTPException(status_code=409, detail="No active workout")
    return state


@app.post("/analyze_frame", response_model=WorkoutState)
async def analyze_frame(file: UploadFile = File(...), mode: Optional[str] = Form(None)):
    """
    Detect the pose in an uploaded image and run it through the active workout.
    Starts a workout for `mode` when none is running.
    """
    if not pose_service.model:
        raise HTTPException(status_code=500, detail="Model not loaded")

    contents = await file.read()
    img = cv2.imdecode(np.frombuffer(contents, np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise HTTPException(status_code=400, detail="Invalid image")

    if workout_service.active is None:
        try:
            workout_service.start(mode or config.supported_modes[0])
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    try:
        landmarks = pose_service.detect_pose(img)
        state = workout_service.process_frame(landmarks)
    except Exception as e:
        logger.error(f"Error processing frame: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if state is None:
        raise HTTPException(status_code=409, detail="No active workout")

    if config.save_frames:
        debug_service.save_debug_frame(contents, state)
    return state


@app.post("/workout/stop", response_model=WorkoutSummary)
async def stop_workout():
    """Stop the active workout. Session sync finishes in the background."""
    summary = workout_service.stop()
    if summary is None:
        raise HTTPException(status_code=409, detail="No active workout")
    return summary


@app.get("/workout/status", response_model=WorkoutState)
async def workout_status():
    return workout_service.state()


@app.get("/health")
async def health_check():
    """Simple health check endpoint for service monitoring"""
    return {"status": "healthy", "timestamp": time.time()}
