"""
Animation Driver

Owns the time loop of a run: resolves and validates the configuration
before anything is computed, steps the simulator, hands each frame to the
renderer, and optionally exports the frames or saves an animation file.
"""

import argparse
import logging
import multiprocessing as mp
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .config import SimulationConfig
from .exceptions import SoundPropError
from .propagation_model.simulator import Frame, WavefrontSimulator
from .utils.frame_export import FrameExporter, create_run_manifest

logger = logging.getLogger(__name__)

# Module-level simulator used by child processes (avoid pickling the driver)
_WORKER_SIMULATOR = None


def _worker_init(config: SimulationConfig):
    """
    Initializer for worker processes: build a simulator local to each worker.
    """
    global _WORKER_SIMULATOR
    _WORKER_SIMULATOR = WavefrontSimulator.from_config(config)


def _worker_task(step: int) -> Frame:
    global _WORKER_SIMULATOR
    if _WORKER_SIMULATOR is None:
        raise RuntimeError(
            "Worker not initialized. Did you set initializer for the Pool?")
    return _WORKER_SIMULATOR.compute_step(step)


class AnimationDriver:
    """
    Runs a wavefront simulation from a configuration.
    """

    def __init__(self, config: SimulationConfig):
        """
        Initialize the driver.

        Args:
            config: Simulation configuration; resolved and validated here so a
                bad configuration fails before the first frame
        """
        self.config = config.resolve()
        self.simulator = WavefrontSimulator.from_config(self.config)

    def compute_frames(self, num_workers: int = 1, progress: bool = True) -> List[Frame]:
        """
        Compute every frame of the run.

        Frames are independent, so with ``num_workers > 1`` they are computed
        in a process pool and returned in step order.
        """
        steps = range(self.simulator.num_steps)
        if num_workers > 1:
            with mp.Pool(processes=num_workers, initializer=_worker_init,
                         initargs=(self.config,)) as pool:
                return list(tqdm(
                    pool.imap(_worker_task, steps),
                    total=len(steps),
                    desc="Frames",
                    disable=not progress,
                ))
        return [self.simulator.compute_step(step)
                for step in tqdm(steps, desc="Frames", disable=not progress)]

    def animate(self, renderer, pause: Optional[float] = None, progress: bool = True) -> int:
        """
        Draw frames one after another in an interactive window.

        Stops early (without error) on KeyboardInterrupt; any other failure
        aborts the run.

        Returns:
            Number of frames drawn
        """
        if pause is None:
            pause = self.config.render.frame_delay
        drawn = 0
        try:
            for frame in tqdm(self.simulator.iter_frames(), total=self.simulator.num_steps,
                              desc="Animating", disable=not progress):
                renderer.show_frame(frame, pause=pause)
                drawn += 1
        except KeyboardInterrupt:
            logger.info("Animation interrupted after %d frames", drawn)
        return drawn

    def run(
        self,
        output_dir: Optional[str] = None,
        display: bool = True,
        save_animation: Optional[str] = None,
        export_format: Optional[str] = None,
        num_workers: int = 1
    ) -> dict:
        """
        Execute a complete run.

        Args:
            output_dir: Directory for exported frames, animation and manifest
            display: Show frames in an interactive window
            save_animation: File name of an animation to save under output_dir
            export_format: 'json' or 'yaml' to export frame geometry
            num_workers: Processes used to precompute frames

        Returns:
            Run manifest dictionary
        """
        info = self.simulator.get_simulation_info()
        logger.info("=" * 70)
        logger.info("Room Wavefront Simulation")
        logger.info("=" * 70)
        logger.info("Room: %s m", info["room"]["dimensions"])
        logger.info("Sources: %d", len(info["sources"]))
        for src in info["sources"]:
            logger.info("  - #%d at %s, %.1f dB SPL @ 1 m",
                        src["source_id"], src["position_xyz"], src["spl_db"])
        logger.info("Time step: %.3g s (dx = %.3g m), tmax = %.3g s, %d steps",
                    info["dt_s"], info["dx_m"], info["tmax_s"], info["num_steps"])
        logger.info("=" * 70)

        out_dir = Path(output_dir) if output_dir else None
        frames: Optional[List[Frame]] = None
        export_path = None
        animation_path = None

        if export_format or save_animation:
            if out_dir is None:
                raise ValueError("output_dir is required to export frames or save an animation")
            frames = self.compute_frames(num_workers=num_workers)

        if export_format:
            exporter = FrameExporter(format=export_format)
            document = exporter.create_document(frames, info)
            export_path = exporter.save(document, out_dir / "frames")

        renderer = None
        if display or save_animation:
            from .visualization.renderer import WavefrontRenderer
            renderer = WavefrontRenderer.from_config(self.simulator.room, self.config.render)
        try:
            if save_animation:
                fps = 1.0 / self.config.render.frame_delay if self.config.render.frame_delay > 0 else 10.0
                animation_path = renderer.save_animation(frames, out_dir / save_animation, fps=fps)
            if display:
                self.animate(renderer)
        finally:
            if renderer is not None:
                renderer.close()

        manifest_path = out_dir / "manifest.json" if out_dir else None
        manifest = create_run_manifest(
            out_dir or ".", export_path, info,
            animation_path=animation_path, manifest_path=manifest_path)
        logger.info("Simulation completed.")
        return manifest


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """
    Merge a YAML configuration with command line overrides.
    """
    if args.config:
        config = SimulationConfig.from_yaml(args.config)
    elif args.room:
        config = SimulationConfig(room_dimensions=list(args.room))
    else:
        raise ValueError("Either --config or --room is required")

    if args.room:
        config.room_dimensions = list(args.room)
    if args.source:
        config.source_points = [list(p) for p in args.source]
    if args.spl:
        config.spl_db = list(args.spl)
    if args.frequency is not None:
        config.driving_frequency = args.frequency
    if args.tmax is not None:
        config.tmax = args.tmax
    if args.frame_delay is not None:
        config.render.frame_delay = args.frame_delay
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the wavefront animation.
    """
    parser = argparse.ArgumentParser(
        description="Animate sound wavefronts and their first-order wall reflections in a room"
    )
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='Path to configuration YAML file')
    parser.add_argument('--room', type=float, nargs=3, metavar=('LENGTH', 'WIDTH', 'HEIGHT'),
                        help='Room dimensions in meters (overrides config)')
    parser.add_argument('--source', type=float, nargs=3, action='append', metavar=('X', 'Y', 'Z'),
                        help='Source position in meters; repeat for several sources')
    parser.add_argument('--spl', type=float, action='append',
                        help='Source SPL in dB at 1 m; repeat once per source')
    parser.add_argument('--frequency', type=float, default=None,
                        help='Driving frequency in Hz (recorded, not used by the model)')
    parser.add_argument('--tmax', type=float, default=None,
                        help='Simulated duration in seconds')
    parser.add_argument('--frame-delay', type=float, default=None,
                        help='Pause between displayed frames in seconds')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Output directory for exports and animations')
    parser.add_argument('--export', choices=['json', 'yaml'], default=None,
                        help='Export frame geometry in this format')
    parser.add_argument('--save', type=str, default=None,
                        help='Save the animation to this file name under --output (e.g. wave.gif)')
    parser.add_argument('--no-display', action='store_true',
                        help='Do not open an interactive window')
    parser.add_argument('--num-workers', type=int, default=1,
                        help='Number of processes used to precompute frames')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])

    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='[%(levelname)s] %(message)s')

    if args.no_display:
        import matplotlib
        matplotlib.use("Agg")

    try:
        driver = AnimationDriver(build_config(args))
        driver.run(
            output_dir=args.output,
            display=not args.no_display,
            save_animation=args.save,
            export_format=args.export,
            num_workers=args.num_workers,
        )
    except (SoundPropError, FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
