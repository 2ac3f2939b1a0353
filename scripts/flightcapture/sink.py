"""
Capture Sink

Writes each captured FetchFlights response to disk as two JSON documents:
metadata plus payload, and the payload alone.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .schema import CapturedResponse

logger = logging.getLogger(__name__)


class CaptureSink:
    """File-based sink for captured responses."""

    def __init__(self, output_dir: str = "./flight_data"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _filename(self, filename: Optional[str]) -> str:
        if filename:
            return filename if filename.endswith(".json") else f"{filename}.json"
        stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
        return f"united_flights_{stamp}.json"

    def save(
        self, capture: CapturedResponse, filename: Optional[str] = None
    ) -> Optional[tuple[Path, Path]]:
        """
        Save a capture.

        Returns (full_path, simple_path), or None if writing failed. A
        fixed `filename` is overwritten by later captures of the session.
        """
        name = self._filename(filename)
        full_path = self.output_dir / name
        simple_path = self.output_dir / name.replace(".json", "_simple.json")

        document = {
            "metadata": {
                "url": capture.url,
                "timestamp": capture.timestamp,
                "status": capture.status,
                "size": capture.size,
                "headers": capture.headers,
            },
            "flightData": capture.data,
        }

        try:
            with open(full_path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            logger.info("Saved flight data to: %s", full_path)

            with open(simple_path, "w", encoding="utf-8") as f:
                json.dump(capture.data, f, ensure_ascii=False, indent=2)
            logger.info("Saved simplified data to: %s", simple_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save response to file: %s", e)
            return None

        return full_path, simple_path
