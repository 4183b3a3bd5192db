"""
Wavefront Renderer

Draws simulation frames as translucent spheres in a 3D matplotlib axes
bounded by the room. The renderer owns its figure: each call to
``draw_frame`` clears the previous frame before drawing, and nothing here
touches pyplot's implicit current figure.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.animation import FuncAnimation
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  (registers the 3d projection)

from ..propagation_model.simulator import Frame
from ..room_geometry.room import Room

logger = logging.getLogger(__name__)


def sphere_surface(
    center: Sequence[float],
    radius: float,
    resolution: int = 100
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Mesh grid of a sphere surface.

    Args:
        center: [x, y, z] of the sphere center
        radius: Sphere radius (0 collapses the mesh onto the center)
        resolution: Number of faces around and from pole to pole

    Returns:
        X, Y, Z arrays of shape (resolution + 1, resolution + 1)
    """
    if radius < 0:
        raise ValueError("radius must be non-negative")
    n = int(resolution)
    theta = np.linspace(-np.pi, np.pi, n + 1)
    phi = np.linspace(-np.pi / 2, np.pi / 2, n + 1)[:, None]
    cx, cy, cz = (float(c) for c in center)
    x = radius * np.cos(phi) * np.cos(theta) + cx
    y = radius * np.cos(phi) * np.sin(theta) + cy
    z = radius * np.sin(phi) * np.ones_like(theta) + cz
    return x, y, z


class WavefrontRenderer:
    """
    Renders Frame objects into a matplotlib 3D figure.
    """

    def __init__(
        self,
        room: Room,
        face_alpha: float = 0.8,
        sphere_resolution: int = 100,
        elevation: float = 30.0,
        azimuth: float = -37.5,
        figsize: Sequence[float] = (8.0, 6.0)
    ):
        """
        Initialize the renderer and create its figure.

        Args:
            room: Room whose extent bounds the axes
            face_alpha: Opacity of the sphere surfaces
            sphere_resolution: Mesh resolution of each sphere
            elevation: Camera elevation in degrees
            azimuth: Camera azimuth in degrees
            figsize: Figure size in inches
        """
        self.room = room
        self.face_alpha = float(face_alpha)
        self.sphere_resolution = int(sphere_resolution)
        self.elevation = float(elevation)
        self.azimuth = float(azimuth)

        self.fig = plt.figure(figsize=tuple(figsize))
        self.ax = self.fig.add_subplot(111, projection="3d")
        self._surfaces: List = []
        self._setup_axes(title=None)

    def _setup_axes(self, title: Optional[str]):
        ax = self.ax
        ax.set_xlabel("X")
        ax.set_ylabel("Y")
        ax.set_zlabel("Z")
        ax.set_xlim(0.0, self.room.length)
        ax.set_ylim(0.0, self.room.width)
        ax.set_zlim(0.0, self.room.height)
        # equal scale along all three axes
        ax.set_box_aspect(tuple(self.room.dimensions.tolist()))
        ax.grid(True)
        ax.view_init(elev=self.elevation, azim=self.azimuth)
        if title is not None:
            ax.set_title(title)

    @staticmethod
    def frame_title(t: float) -> str:
        return f"Propagation of Sound at t = {t:.4g} seconds"

    def clear(self):
        """Remove everything drawn for the previous frame."""
        self.ax.cla()
        self._surfaces = []

    def draw_frame(self, frame: Frame) -> List:
        """
        Draw one frame, replacing whatever was drawn before.

        Returns:
            The surface artists that were added
        """
        self.clear()
        for element in frame.elements:
            x, y, z = sphere_surface(element.center, element.radius, self.sphere_resolution)
            surf = self.ax.plot_surface(
                x, y, z,
                color=element.rgb,
                edgecolor="none",
                linewidth=0,
                alpha=self.face_alpha,
                shade=False,
            )
            self._surfaces.append(surf)
        self._setup_axes(self.frame_title(frame.time))
        return list(self._surfaces)

    def show_frame(self, frame: Frame, pause: float = 0.1):
        """Draw a frame into an interactive window and wait ``pause`` seconds."""
        self.draw_frame(frame)
        self.fig.canvas.draw_idle()
        plt.pause(max(pause, 1e-3))

    def save_frame(self, frame: Frame, output_path: Union[str, Path], dpi: int = 100) -> Path:
        """Render a single frame to an image file."""
        out_p = Path(output_path)
        out_p.parent.mkdir(parents=True, exist_ok=True)
        self.draw_frame(frame)
        self.fig.savefig(out_p, dpi=dpi)
        return out_p

    def save_animation(
        self,
        frames: Iterable[Frame],
        output_path: Union[str, Path],
        fps: float = 10.0,
        dpi: int = 100
    ) -> Path:
        """
        Render frames into an animation file.

        GIF output uses the Pillow writer; any other suffix uses ffmpeg.

        Args:
            frames: Frames in playback order
            output_path: Destination file (.gif, .mp4, ...)
            fps: Playback rate
            dpi: Output resolution

        Returns:
            Path written
        """
        frame_list = list(frames)
        if not frame_list:
            raise ValueError("At least one frame is required to save an animation")
        out_p = Path(output_path)
        out_p.parent.mkdir(parents=True, exist_ok=True)
        writer = "pillow" if out_p.suffix.lower() == ".gif" else "ffmpeg"

        anim = FuncAnimation(
            self.fig,
            self.draw_frame,
            frames=frame_list,
            interval=1000.0 / fps,
            blit=False,
            repeat=False,
        )
        anim.save(str(out_p), writer=writer, fps=fps, dpi=dpi)
        logger.info("Saved %d-frame animation to %s", len(frame_list), out_p)
        return out_p

    def close(self):
        """Release the figure."""
        plt.close(self.fig)

    def __enter__(self) -> 'WavefrontRenderer':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @classmethod
    def from_config(cls, room: Room, render_options) -> 'WavefrontRenderer':
        """
        Create a renderer from RenderOptions.
        """
        return cls(
            room=room,
            face_alpha=render_options.face_alpha,
            sphere_resolution=render_options.sphere_resolution,
            elevation=render_options.elevation,
            azimuth=render_options.azimuth,
            figsize=render_options.figsize,
        )
