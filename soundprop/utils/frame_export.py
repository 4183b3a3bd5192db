"""
Frame Export Utilities

This module provides utilities for writing computed wavefront frames to
JSON or YAML so a run can be inspected or rendered by another tool.
"""

import json
import logging
import math
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np
import yaml

from .levels import spl_to_pressure

logger = logging.getLogger(__name__)


class FrameExporter:
    """
    Serializes simulation frames and run metadata.

    Each exported document holds:
    - Simulation metadata (room, sources, time step)
    - One entry per frame with its time and wavefront spheres
    """

    def __init__(self, format: str = "json"):
        """
        Initialize frame exporter.

        Args:
            format: Output format ('json' or 'yaml')
        """
        if format not in ['json', 'yaml']:
            raise ValueError(
                f"Unsupported format: {format}. Use 'json' or 'yaml'")
        self.format = format

    def frame_to_dict(self, frame) -> Dict[str, Any]:
        """
        Convert a Frame into plain data.
        """
        return {
            "step": int(frame.step),
            "time_s": float(frame.time),
            "wavefronts": [
                {
                    "source_id": int(el.source_index),
                    "kind": el.kind,
                    "center_xyz": el.center,
                    "radius_m": el.radius,
                    "spl_db": el.spl,
                    "pressure_pa": spl_to_pressure(el.spl),
                    "rgb": list(el.rgb),
                }
                for el in frame.elements
            ],
        }

    def create_document(
        self,
        frames: Iterable,
        simulation_info: Dict[str, Any],
        additional_metadata: Dict[str, Any] = None
    ) -> Dict[str, Any]:
        """
        Build the complete export document for a run.

        Args:
            frames: Iterable of Frame objects
            simulation_info: Metadata from WavefrontSimulator.get_simulation_info()
            additional_metadata: Optional additional metadata

        Returns:
            Export dictionary
        """
        frame_dicts = [self.frame_to_dict(f) for f in frames]
        document = {
            "created": datetime.now().isoformat(),
            "simulation": simulation_info,
            "num_frames": len(frame_dicts),
            "frames": frame_dicts,
        }
        if additional_metadata:
            document.update(additional_metadata)
        return document

    # serialize helper: convert Paths, numpy types, etc. into JSON/YAML-friendly types
    def _serialize_for_output(self, obj: Any) -> Any:
        if isinstance(obj, Path):
            return str(obj)

        if isinstance(obj, np.ndarray):
            return self._serialize_for_output(obj.tolist())

        # numpy scalar -> native python using item()
        if isinstance(obj, np.generic):
            return self._serialize_for_output(obj.item())

        if isinstance(obj, dict):
            return {k: self._serialize_for_output(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [self._serialize_for_output(v) for v in obj]

        # non-finite floats have no JSON representation
        if isinstance(obj, float):
            if not math.isfinite(obj):
                return None
            return obj
        if isinstance(obj, (str, int, bool, type(None))):
            return obj

        return str(obj)

    def save(
        self,
        document: Dict[str, Any],
        output_path: Union[str, Path]
    ) -> Path:
        """
        Save an export document to file.

        Args:
            document: Document from create_document()
            output_path: Output file path (extension will be added if not present)

        Returns:
            Path actually written
        """
        out_p = Path(output_path)
        suffix = out_p.suffix.lower()
        if self.format == "json":
            if suffix != ".json":
                out_p = out_p.with_suffix(".json")
        else:
            if suffix not in (".yaml", ".yml"):
                out_p = out_p.with_suffix(".yaml")

        out_p.parent.mkdir(parents=True, exist_ok=True)

        to_write = self._serialize_for_output(document)

        # write next to the target then replace, so readers never see a partial file
        temp_out = out_p.with_name(out_p.name + ".tmp")
        with temp_out.open("w", encoding="utf-8") as f:
            if self.format == "json":
                json.dump(to_write, f, indent=2, ensure_ascii=False)
            else:
                yaml.safe_dump(to_write, f, default_flow_style=False,
                               allow_unicode=True, sort_keys=False)
        os.replace(str(temp_out), str(out_p))
        logger.info("Wrote %d frames to %s", document.get("num_frames", 0), out_p)
        return out_p

    def load(self, export_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load an export document from file.
        """
        p = Path(export_path)
        if not p.exists():
            raise FileNotFoundError(f"Frame export not found: {export_path}")

        suffix = p.suffix.lower()
        if suffix == '.json':
            with p.open('r', encoding='utf-8') as f:
                document = json.load(f)
        elif suffix in ('.yaml', '.yml'):
            with p.open('r', encoding='utf-8') as f:
                document = yaml.safe_load(f)
        else:
            raise ValueError(f"Unknown export file format: {export_path}")

        if document is None:
            document = {}
        elif not isinstance(document, dict):
            raise ValueError(f"Export file {export_path} does not contain a mapping")
        return document

    def validate_document(self, document: Dict[str, Any]) -> bool:
        """
        Validate that an export document contains all required fields.

        Returns:
            True if valid, raises ValueError if invalid
        """
        for key in ("simulation", "num_frames", "frames"):
            if key not in document:
                raise ValueError(f"Missing required field: {key}")
        if not isinstance(document["frames"], list):
            raise ValueError("'frames' must be a list")
        if document["num_frames"] != len(document["frames"]):
            raise ValueError("'num_frames' does not match the number of frames")

        for i, frame in enumerate(document["frames"]):
            for key in ("step", "time_s", "wavefronts"):
                if key not in frame:
                    raise ValueError(f"Frame {i} missing required field: {key}")
            for j, wf in enumerate(frame["wavefronts"]):
                center = wf.get("center_xyz")
                if not isinstance(center, (list, tuple)) or len(center) != 3:
                    raise ValueError(
                        f"Frame {i} wavefront {j} center_xyz must be a list of 3 numbers")
                radius = wf.get("radius_m")
                if not isinstance(radius, (int, float)) or radius < 0:
                    raise ValueError(
                        f"Frame {i} wavefront {j} radius_m must be a non-negative number")
        return True


def create_run_manifest(
    output_dir: Union[str, Path],
    export_path: Optional[Union[str, Path]],
    simulation_info: Dict[str, Any],
    animation_path: Optional[Union[str, Path]] = None,
    manifest_path: Optional[Union[str, Path]] = None
) -> Dict[str, Any]:
    """
    Summarize the artifacts of a run.

    Args:
        output_dir: Root directory of the run outputs
        export_path: Frame export file, if one was written
        simulation_info: Metadata from WavefrontSimulator.get_simulation_info()
        animation_path: Saved animation file, if any
        manifest_path: Optional path to save the manifest (if None, returns dict only)

    Returns:
        Manifest dictionary
    """
    sources: List[Dict[str, Any]] = simulation_info.get("sources", [])
    manifest = {
        "output_dir": str(output_dir),
        "created": datetime.now().isoformat(),
        "frames_path": str(export_path) if export_path else None,
        "animation_path": str(animation_path) if animation_path else None,
        "num_steps": simulation_info.get("num_steps"),
        "num_sources": len(sources),
        "source_spl_db": [s.get("spl_db") for s in sources],
    }

    if manifest_path:
        out_p = Path(manifest_path)
        out_p.parent.mkdir(parents=True, exist_ok=True)
        with out_p.open('w', encoding='utf-8') as f:
            json.dump(manifest, f, indent=2, ensure_ascii=False)

    return manifest
