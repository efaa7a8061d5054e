#!/usr/bin/env python3
"""
CLI script for running the stress monitor on a live camera.

Usage:
    python scripts/run_monitor.py --mode preview      # Camera window with mesh + stress overlay
    python scripts/run_monitor.py --mode headless     # Log readings only
    python scripts/run_monitor.py --video-file x.mp4  # Use video instead of camera
"""

import argparse
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import cv2
import numpy as np
from loguru import logger

from stress_monitor import MonitorConfig, StressMonitor, StressLabel
from stress_monitor.vision import CameraConfig
from stress_monitor.pipeline import LoopConfig, Publication


LABEL_COLORS = {
    StressLabel.LOW: (0, 200, 0),
    StressLabel.MODERATE: (0, 200, 255),
    StressLabel.HIGH: (0, 0, 255),
}


def setup_logging(verbose: bool = False):
    """Configure logging."""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level
    )


def draw_stress_overlay(frame: np.ndarray, publication: Publication | None, status: str) -> np.ndarray:
    """Draw mesh points and the current stress reading on a frame."""
    overlay = frame.copy()

    if publication is None:
        cv2.putText(overlay, status, (20, 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2)
        return overlay

    for x, y in publication.mesh.astype(np.int32):
        cv2.circle(overlay, (int(x), int(y)), 1, (90, 220, 255), -1)

    reading = publication.reading
    color = LABEL_COLORS[reading.label]

    # Semi-transparent panel
    panel = overlay.copy()
    cv2.rectangle(panel, (10, 10), (260, 80), (0, 0, 0), -1)
    cv2.addWeighted(panel, 0.6, overlay, 0.4, 0, overlay)

    cv2.putText(overlay, f"{reading.label.value}: {reading.score:.2f}", (20, 38),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)

    bar_width = int(reading.score * 220)
    cv2.rectangle(overlay, (20, 52), (20 + bar_width, 66), color, -1)
    cv2.rectangle(overlay, (20, 52), (240, 66), (255, 255, 255), 1)

    return overlay


def run_preview_mode(monitor: StressMonitor):
    """Show the camera feed with the stress overlay until 'q' is pressed."""
    logger.info("Starting preview mode. Press 'q' to quit.")

    while True:
        frame_data = monitor.camera.get_frame(timeout=1.0)
        if frame_data is None:
            logger.warning("No frame available")
            continue

        _, frame = frame_data
        overlay = draw_stress_overlay(frame, monitor.publication, monitor.status_message)
        cv2.imshow("Stress Monitor - Press 'q' to quit", overlay)

        if cv2.waitKey(1) & 0xFF == ord('q'):
            break

    cv2.destroyAllWindows()
    logger.info("Preview mode ended")


def run_headless_mode(monitor: StressMonitor, duration: float):
    """Log each new reading for a fixed duration."""
    logger.info(f"Monitoring for {duration:.0f}s...")

    last_timestamp = None
    end_time = time.time() + duration
    while time.time() < end_time:
        publication = monitor.publication
        if publication is not None and publication.timestamp != last_timestamp:
            last_timestamp = publication.timestamp
            reading = publication.reading
            logger.info(f"Stress: {reading.score:.3f} ({reading.label.value})")
        time.sleep(0.2)

    stats = monitor.stats
    if stats is not None:
        logger.info("=" * 50)
        logger.info("SESSION STATS")
        logger.info("=" * 50)
        logger.info(f"Ticks:              {stats.ticks}")
        logger.info(f"Readings published: {stats.readings_published}")
        logger.info(f"Face detection rate: {stats.face_ratio:.1%}")
        logger.info(f"Malformed frames:   {stats.malformed_ticks}")


def main():
    parser = argparse.ArgumentParser(
        description="Live stress estimation from facial landmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  preview   - Live camera feed with face mesh and stress overlay
  headless  - Log stress readings to the console

Examples:
  python scripts/run_monitor.py --mode preview
  python scripts/run_monitor.py --mode headless --duration 60
  python scripts/run_monitor.py --mode preview --video-file data/test_video.mp4
        """
    )

    parser.add_argument(
        "--mode",
        type=str,
        choices=["preview", "headless"],
        default="preview",
        help="Run mode (default: preview)"
    )
    parser.add_argument(
        "--video-file",
        type=str,
        default=None,
        help="Path to video file to use when no camera is available"
    )
    parser.add_argument(
        "--camera-id",
        type=int,
        default=0,
        help="Camera device ID (default: 0)"
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=15.0,
        help="Maximum detection ticks per second (default: 15)"
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=30.0,
        help="Seconds to run in headless mode (default: 30)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    config = MonitorConfig(
        camera=CameraConfig(device_id=args.camera_id, fallback_video=args.video_file),
        loop=LoopConfig(target_fps=args.fps),
    )

    with StressMonitor(config) as monitor:
        if not monitor.readiness.is_ready:
            logger.error(monitor.status_message)
            if not args.video_file:
                logger.info("Tip: Use --video-file to run on a video file instead")
            return 1

        if monitor.camera.using_fallback:
            logger.info("Using fallback video file")

        if args.mode == "preview":
            run_preview_mode(monitor)
        else:
            run_headless_mode(monitor, args.duration)

    logger.info("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
