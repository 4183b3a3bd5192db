"""
Unit Tests for configuration, frame export and the animation driver.
"""

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

import yaml

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from soundprop.config import (DEFAULT_SPL_DB, RenderOptions,  # noqa: E402
                              SimulationConfig)
from soundprop.driver import AnimationDriver, main  # noqa: E402
from soundprop.exceptions import (ConfigurationError,  # noqa: E402
                                  InvalidRoomDimension, SourceCountMismatch)
from soundprop.propagation_model.simulator import \
    WavefrontSimulator  # noqa: E402
from soundprop.room_geometry.room import Room, Source  # noqa: E402
from soundprop.utils.frame_export import (FrameExporter,  # noqa: E402
                                          create_run_manifest)


class TestSimulationConfig(unittest.TestCase):
    """Test cases for SimulationConfig."""

    def test_defaults_to_room_center(self):
        config = SimulationConfig(room_dimensions=[5.0, 5.0, 3.0]).resolve()
        self.assertEqual(config.source_points, [[2.5, 2.5, 1.5]])
        self.assertEqual(config.spl_db, [DEFAULT_SPL_DB])
        self.assertEqual(DEFAULT_SPL_DB, 110.0)

    def test_empty_lists_use_defaults(self):
        config = SimulationConfig([4.0, 4.0, 2.0], source_points=[], spl_db=[]).resolve()
        self.assertEqual(config.source_points, [[2.0, 2.0, 1.0]])
        self.assertEqual(config.spl_db, [110.0])

    def test_default_spl_for_every_source(self):
        config = SimulationConfig(
            [10.0, 30.0, 20.0], source_points=[[1, 1, 10], [9, 29, 10]]).resolve()
        self.assertEqual(config.spl_db, [110.0, 110.0])

    def test_scalar_spl_broadcast(self):
        config = SimulationConfig(
            [10.0, 30.0, 20.0], source_points=[[1, 1, 10], [9, 29, 10]], spl_db=100).resolve()
        self.assertEqual(config.spl_db, [100.0, 100.0])

    def test_flat_point_is_one_source(self):
        config = SimulationConfig([5.0, 5.0, 3.0], source_points=[1, 2, 1]).resolve()
        self.assertEqual(config.source_points, [[1.0, 2.0, 1.0]])

    def test_source_count_mismatch(self):
        """Scenario 3: two sources, three SPLs."""
        config = SimulationConfig(
            [10.0, 30.0, 20.0],
            source_points=[[1, 1, 10], [9, 29, 10]],
            spl_db=[110.0, 100.0, 105.0])
        with self.assertRaises(SourceCountMismatch) as ctx:
            config.resolve()
        self.assertEqual(ctx.exception.num_sources, 2)
        self.assertEqual(ctx.exception.num_levels, 3)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_invalid_room(self):
        for dims in ([5.0, 0.0, 3.0], [5.0, 5.0], "abc", [5.0, "x", 3.0]):
            with self.assertRaises(InvalidRoomDimension):
                SimulationConfig(room_dimensions=dims).resolve()

    def test_invalid_values(self):
        with self.assertRaises(ConfigurationError):
            SimulationConfig([5, 5, 3], tmax=-0.1).resolve()
        with self.assertRaises(ConfigurationError):
            SimulationConfig([5, 5, 3], speed_of_sound=0).resolve()
        with self.assertRaises(ConfigurationError):
            SimulationConfig([5, 5, 3], source_points=[[1, 2]]).resolve()
        with self.assertRaises(ConfigurationError):
            SimulationConfig([5, 5, 3], render=RenderOptions(face_alpha=1.5)).resolve()

    def test_string_spl_rejected(self):
        points = [[1, 1, 1], [2, 2, 2], [3, 3, 2]]
        for spl in ("110", b"110"):
            with self.assertRaises(ConfigurationError) as ctx:
                SimulationConfig([5, 5, 3], source_points=points, spl_db=spl).resolve()
            self.assertNotIsInstance(ctx.exception, SourceCountMismatch)

    def test_non_numeric_render_options(self):
        for options in (RenderOptions(face_alpha="high"),
                        RenderOptions(frame_delay="slow"),
                        RenderOptions(sphere_resolution=None),
                        RenderOptions(sphere_resolution=2),
                        RenderOptions(azimuth="left")):
            with self.assertRaises(ConfigurationError):
                SimulationConfig([5, 5, 3], render=options).resolve()

    def test_render_options_coerced(self):
        config = SimulationConfig(
            [5, 5, 3], render=RenderOptions(face_alpha="0.5", sphere_resolution=12.0)).resolve()
        self.assertEqual(config.render.face_alpha, 0.5)
        self.assertEqual(config.render.sphere_resolution, 12)
        self.assertIsInstance(config.render.sphere_resolution, int)

    def test_non_numeric_timing_rejected(self):
        for kwargs in ({'tmax': 'soon'}, {'min_radius': None}):
            with self.assertRaises(ConfigurationError):
                SimulationConfig([5, 5, 3], **kwargs).resolve()
        self.assertEqual(SimulationConfig([5, 5, 3], tmax="0.05").resolve().tmax, 0.05)

    def test_driving_frequency_carried(self):
        config = SimulationConfig([5, 5, 3], driving_frequency=250).resolve()
        self.assertEqual(config.driving_frequency, 250.0)
        sim = WavefrontSimulator.from_config(config)
        self.assertEqual(sim.model.driving_frequency, 250.0)

    def test_build_sources_requires_resolve(self):
        with self.assertRaises(ConfigurationError):
            SimulationConfig([5, 5, 3]).build_sources()

    def test_from_dict(self):
        config = SimulationConfig.from_dict({
            'room': {'dimensions': [10, 30, 20]},
            'sources': {'points': [[1, 1, 10]], 'spl_db': [105]},
            'simulation': {'tmax': 0.05},
            'render': {'face_alpha': 0.5},
        }).resolve()
        self.assertEqual(config.room_dimensions, [10.0, 30.0, 20.0])
        self.assertEqual(config.spl_db, [105.0])
        self.assertEqual(config.tmax, 0.05)
        self.assertEqual(config.render.face_alpha, 0.5)

    def test_from_dict_missing_room(self):
        with self.assertRaises(ConfigurationError):
            SimulationConfig.from_dict({'sources': {}})

    def test_from_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump({'room': {'dimensions': [4, 4, 3]}}, f)
            config = SimulationConfig.from_yaml(path).resolve()
            self.assertEqual(config.source_points, [[2.0, 2.0, 1.5]])

    def test_bundled_default_config(self):
        path = Path(project_root) / "config" / "default.yaml"
        config = SimulationConfig.from_yaml(path).resolve()
        self.assertEqual(config.room_dimensions, [5.0, 5.0, 3.0])
        self.assertEqual(config.spl_db, [110.0])

    def test_missing_yaml(self):
        with self.assertRaises(FileNotFoundError):
            SimulationConfig.from_yaml("/nonexistent/config.yaml")


class TestFrameExporter(unittest.TestCase):
    """Test cases for FrameExporter."""

    def setUp(self):
        self.simulator = WavefrontSimulator(
            Room(5.0, 5.0, 3.0), [Source([2.5, 2.5, 1.5], 110.0)], tmax=0.002)
        self.frames = list(self.simulator.iter_frames())
        self.info = self.simulator.get_simulation_info()

    def test_unsupported_format(self):
        with self.assertRaises(ValueError):
            FrameExporter(format='xml')

    def test_frame_to_dict(self):
        data = FrameExporter().frame_to_dict(self.frames[1])
        self.assertEqual(data['step'], 1)
        self.assertEqual(len(data['wavefronts']), 7)
        self.assertEqual(data['wavefronts'][0]['kind'], 'direct')
        self.assertEqual(data['wavefronts'][1]['kind'], 'x_low')
        direct = data['wavefronts'][0]
        self.assertAlmostEqual(direct['pressure_pa'], 20e-6 * 10 ** (direct['spl_db'] / 20))

    def test_save_and_load_json(self):
        exporter = FrameExporter(format='json')
        document = exporter.create_document(self.frames, self.info)
        with tempfile.TemporaryDirectory() as tmp:
            path = exporter.save(document, Path(tmp) / "frames")
            self.assertEqual(path.suffix, ".json")
            loaded = exporter.load(path)
        self.assertTrue(exporter.validate_document(loaded))
        self.assertEqual(loaded['num_frames'], 5)
        self.assertEqual(loaded['frames'][0]['wavefronts'], [])
        first = loaded['frames'][1]['wavefronts'][0]
        self.assertEqual(first['center_xyz'], [2.5, 2.5, 1.5])
        self.assertAlmostEqual(first['radius_m'], 343.0 * self.frames[1].time)

    def test_save_and_load_yaml(self):
        exporter = FrameExporter(format='yaml')
        document = exporter.create_document(self.frames, self.info)
        with tempfile.TemporaryDirectory() as tmp:
            path = exporter.save(document, Path(tmp) / "frames.yml")
            self.assertEqual(path.suffix, ".yml")
            loaded = exporter.load(path)
        self.assertTrue(exporter.validate_document(loaded))
        self.assertEqual(len(loaded['frames'][2]['wavefronts']), 7)

    def test_non_finite_values_become_null(self):
        exporter = FrameExporter()
        data = exporter._serialize_for_output({'a': float('inf'), 'b': [1.0, float('nan')]})
        self.assertEqual(data, {'a': None, 'b': [1.0, None]})

    def test_validate_invalid_document(self):
        with self.assertRaises(ValueError):
            FrameExporter().validate_document({'frames': []})

    def test_run_manifest(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "manifest.json"
            manifest = create_run_manifest(tmp, None, self.info, manifest_path=path)
            with path.open(encoding="utf-8") as f:
                on_disk = json.load(f)
        self.assertEqual(manifest['num_sources'], 1)
        self.assertEqual(on_disk['source_spl_db'], [110.0])
        self.assertIsNone(on_disk['frames_path'])


class TestAnimationDriver(unittest.TestCase):
    """Test cases for AnimationDriver and the command line entry point."""

    def setUp(self):
        self.config = SimulationConfig([5.0, 5.0, 3.0], tmax=0.002)

    def test_invalid_config_fails_before_run(self):
        with self.assertRaises(SourceCountMismatch):
            AnimationDriver(SimulationConfig(
                [10, 30, 20], source_points=[[1, 1, 10], [9, 29, 10]], spl_db=[110, 100, 105]))

    def test_compute_frames(self):
        frames = AnimationDriver(self.config).compute_frames(progress=False)
        self.assertEqual([f.step for f in frames], [0, 1, 2, 3, 4])
        self.assertEqual(len(frames[3]), 7)

    def test_compute_frames_in_parallel(self):
        driver = AnimationDriver(self.config)
        serial = driver.compute_frames(progress=False)
        parallel = driver.compute_frames(num_workers=2, progress=False)
        self.assertEqual([f.time for f in parallel], [f.time for f in serial])
        self.assertEqual([len(f) for f in parallel], [len(f) for f in serial])

    def test_animate_hands_every_frame_to_renderer(self):
        class RecordingRenderer:
            def __init__(self):
                self.frames = []
                self.pauses = []

            def show_frame(self, frame, pause=0.1):
                self.frames.append(frame)
                self.pauses.append(pause)

        driver = AnimationDriver(self.config)
        renderer = RecordingRenderer()
        drawn = driver.animate(renderer, progress=False)
        self.assertEqual(drawn, 5)
        self.assertEqual([f.step for f in renderer.frames], [0, 1, 2, 3, 4])
        self.assertEqual(renderer.pauses, [0.1] * 5)

    def test_animate_stops_on_interrupt(self):
        class InterruptingRenderer:
            def __init__(self):
                self.calls = 0

            def show_frame(self, frame, pause=0.1):
                self.calls += 1
                if self.calls == 3:
                    raise KeyboardInterrupt

        drawn = AnimationDriver(self.config).animate(InterruptingRenderer(), progress=False)
        self.assertEqual(drawn, 2)

    def test_animate_propagates_failures(self):
        class FailingRenderer:
            def show_frame(self, frame, pause=0.1):
                raise RuntimeError("draw failed")

        with self.assertRaises(RuntimeError):
            AnimationDriver(self.config).animate(FailingRenderer(), progress=False)

    def test_run_exports_frames(self):
        driver = AnimationDriver(self.config)
        with tempfile.TemporaryDirectory() as tmp:
            manifest = driver.run(output_dir=tmp, display=False, export_format='json')
            self.assertTrue(Path(manifest['frames_path']).exists())
            self.assertTrue((Path(tmp) / "manifest.json").exists())
        self.assertEqual(manifest['num_steps'], 5)

    def test_run_requires_output_dir_for_export(self):
        with self.assertRaises(ValueError):
            AnimationDriver(self.config).run(display=False, export_format='json')

    def test_main_export(self):
        with tempfile.TemporaryDirectory() as tmp:
            code = main([
                '--room', '5', '5', '3', '--source', '1', '1', '1', '--spl', '100',
                '--tmax', '0.001', '--no-display', '--output', tmp, '--export', 'yaml',
                '--log-level', 'WARNING',
            ])
            self.assertEqual(code, 0)
            self.assertTrue((Path(tmp) / "frames.yaml").exists())

    def test_main_mismatch_returns_error(self):
        code = main([
            '--room', '10', '30', '20',
            '--source', '1', '1', '10', '--source', '9', '29', '10',
            '--spl', '110', '--spl', '100', '--spl', '105',
            '--no-display', '--log-level', 'ERROR',
        ])
        self.assertEqual(code, 1)

    def test_main_invalid_room_returns_error(self):
        code = main(['--room', '5', '0', '3', '--no-display', '--log-level', 'ERROR'])
        self.assertEqual(code, 1)

    def test_main_bad_render_value_returns_error(self):
        for render in ({'face_alpha': 'high'}, {'sphere_resolution': None}):
            with tempfile.TemporaryDirectory() as tmp:
                path = Path(tmp) / "config.yaml"
                with path.open('w', encoding='utf-8') as f:
                    yaml.safe_dump({'room': {'dimensions': [5, 5, 3]}, 'render': render}, f)
                code = main(['--config', str(path), '--no-display', '--log-level', 'ERROR'])
            self.assertEqual(code, 1)

    def test_main_string_spl_returns_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            with path.open('w', encoding='utf-8') as f:
                yaml.safe_dump({'room': {'dimensions': [5, 5, 3]},
                                'sources': {'points': [[1, 1, 1]], 'spl_db': '110'}}, f)
            code = main(['--config', str(path), '--no-display', '--log-level', 'ERROR'])
        self.assertEqual(code, 1)


if __name__ == '__main__':
    unittest.main(verbosity=2)
