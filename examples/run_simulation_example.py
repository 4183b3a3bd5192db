"""
Example Script: Single Simulation Run

This script demonstrates how to use the wavefront simulator step by step:
load a configuration, inspect individual frames, and save a snapshot image,
a frame export and a short GIF without opening a window.
"""

import argparse
import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

from soundprop.config import SimulationConfig  # noqa: E402
from soundprop.propagation_model.classifier import classify  # noqa: E402
from soundprop.propagation_model.simulator import \
    WavefrontSimulator  # noqa: E402
from soundprop.utils.frame_export import FrameExporter  # noqa: E402
from soundprop.visualization.renderer import WavefrontRenderer  # noqa: E402


def main():
    """
    Run a single simulation example.
    """
    parser = argparse.ArgumentParser(
        description="Run single wavefront simulation example")
    parser.add_argument("--config", "-c", type=str,
                        default=None, help="Path to config yaml")
    parser.add_argument("--output", "-o", type=str, default=None,
                        help="Output directory")
    parser.add_argument("--gif-frames", type=int, default=20,
                        help="Number of frames (evenly spaced) in the example GIF")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO,
                        format="%(levelname)s: %(message)s")
    logging.info("Room Wavefront Simulator - Single Simulation Example")

    # ========================================================================
    # 1. Load Configuration
    # ========================================================================
    logging.info("[1/5] Loading configuration...")
    if args.config:
        config_path = Path(args.config)
    else:
        config_path = Path(__file__).resolve(
        ).parent.parent / "config" / "default.yaml"
    config = SimulationConfig.from_yaml(config_path).resolve()
    logging.info(f"  - Room dimensions: {config.room_dimensions} m")
    logging.info(f"  - Sources: {config.source_points}")
    logging.info(f"  - SPL at 1 m: {config.spl_db} dB")

    # ========================================================================
    # 2. Create Simulator
    # ========================================================================
    logging.info("[2/5] Creating wavefront simulator...")
    simulator = WavefrontSimulator.from_config(config)
    info = simulator.get_simulation_info()
    logging.info(f"  - Grid spacing: {info['dx_m']:.4f} m")
    logging.info(f"  - Time step: {info['dt_s']:.2e} s")
    logging.info(f"  - Steps: {info['num_steps']}")

    # ========================================================================
    # 3. Inspect Frames
    # ========================================================================
    logging.info("[3/5] Inspecting wavefronts...")
    for t in (0.0, 0.01, 0.05):
        frame = simulator.compute_frame(t)
        if not frame.elements:
            logging.info(f"  - t={t:.3f} s: no wavefront yet")
            continue
        direct = frame.elements[0]
        bucket = classify(direct.spl)
        logging.info(
            f"  - t={t:.3f} s: r={direct.radius:.2f} m, SPL={direct.spl:.1f} dB "
            f"({bucket.name}), {len(frame)} spheres")

    # ========================================================================
    # 4. Render
    # ========================================================================
    logging.info("[4/5] Rendering...")
    if args.output:
        output_dir = Path(args.output)
    else:
        output_dir = Path(__file__).resolve(
        ).parent.parent / "output" / "example"
    output_dir = output_dir.resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    stride = max(1, simulator.num_steps // max(1, args.gif_frames))
    frames = [simulator.compute_step(k)
              for k in range(0, simulator.num_steps, stride)]

    with WavefrontRenderer.from_config(simulator.room, config.render) as renderer:
        snapshot = renderer.save_frame(simulator.compute_frame(0.01), output_dir / "snapshot.png")
        logging.info(f"  - Snapshot: {snapshot}")
        gif_path = renderer.save_animation(frames, output_dir / "example.gif", fps=5)
        logging.info(f"  - Animation: {gif_path}")

    # ========================================================================
    # 5. Export
    # ========================================================================
    logging.info("[5/5] Exporting frames...")
    exporter = FrameExporter(format="json")
    document = exporter.create_document(frames, info)
    export_path = exporter.save(document, output_dir / "frames.json")
    logging.info(f"  - Frame export: {export_path}")

    logging.info("Simulation completed successfully!")
    logging.info(f"Generated files in: {output_dir}")


if __name__ == "__main__":
    main()
