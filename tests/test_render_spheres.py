"""End-to-end tests for the sphere rendering script.

Taichi is already initialized by the test session, so these tests call
render_spheres() directly instead of main().
"""

import pytest
from PIL import Image as PILImage


class TestArguments:
    """Tests for command-line parsing."""

    def test_defaults(self):
        """Test default render settings."""
        from examples.render_spheres import parse_args

        args = parse_args([])
        assert args.width == 400
        assert args.height == 225
        assert args.samples == 100
        assert args.max_depth == 50
        assert args.output == "spheres.png"
        assert args.scene is None
        assert args.quiet is False

    def test_overrides(self):
        """Test flags override the defaults."""
        from examples.render_spheres import parse_args

        args = parse_args(
            ["--width", "32", "--height", "16", "--samples", "3", "--max-depth", "4", "--quiet"]
        )
        assert (args.width, args.height, args.samples, args.max_depth) == (32, 16, 3, 4)
        assert args.quiet is True


class TestRender:
    """Tests for rendering to a file."""

    def test_render_demo_scene(self, tmp_path):
        """Test the demo scene renders to a PNG of the requested size."""
        from examples.render_spheres import render_spheres

        output = tmp_path / "demo.png"
        result = render_spheres(
            width=16,
            height=8,
            num_samples=3,
            max_depth=5,
            output_path=str(output),
            batch_size=2,
            quiet=True,
        )

        assert result == output
        with PILImage.open(output) as loaded:
            assert loaded.size == (16, 8)

    def test_render_scene_file(self, tmp_path, capsys):
        """Test a scene saved as JSON can be rendered."""
        from examples.render_spheres import render_spheres
        from raykernel.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -1.0), 0.5, (0.9, 0.9, 0.9), fuzz=0.1)
        scene_path = tmp_path / "scene.json"
        scene.save_json(scene_path)

        output = tmp_path / "mirror.png"
        render_spheres(
            width=8,
            height=8,
            num_samples=2,
            output_path=str(output),
            scene_path=str(scene_path),
        )

        out = capsys.readouterr().out
        assert "Scene: 1 spheres, 1 materials" in out
        assert output.exists()

    def test_invalid_batch_size(self, tmp_path):
        """Test a non-positive batch size is rejected."""
        from examples.render_spheres import render_spheres

        with pytest.raises(ValueError):
            render_spheres(output_path=str(tmp_path / "x.png"), batch_size=0, quiet=True)


class TestMain:
    """Tests for backend selection and error reporting in main().

    ti.init and ti.reset are replaced so the session's runtime is untouched.
    """

    def test_falls_back_to_cpu_after_reset(self, monkeypatch, tmp_path):
        """Test a failed GPU init resets the runtime before the CPU init."""
        import taichi as ti

        import examples.render_spheres as script

        calls = []

        def fake_init(arch=None, **kwargs):
            calls.append(("init", arch))
            if arch == ti.gpu:
                raise RuntimeError("no GPU")

        monkeypatch.setattr(script.ti, "init", fake_init)
        monkeypatch.setattr(script.ti, "reset", lambda: calls.append(("reset", None)))
        monkeypatch.setattr(script, "render_spheres", lambda **kwargs: tmp_path / "out.png")

        assert script.main(["--quiet"]) == 0
        assert calls == [("init", ti.gpu), ("reset", None), ("init", ti.cpu)]

    def test_render_error_returns_1(self, monkeypatch, capsys):
        """Test a failing render prints to stderr and returns exit code 1."""
        import examples.render_spheres as script

        def failing_render(**kwargs):
            raise ValueError("bad scene")

        monkeypatch.setattr(script.ti, "init", lambda **kwargs: None)
        monkeypatch.setattr(script, "render_spheres", failing_render)

        assert script.main(["--quiet"]) == 1
        assert "Error: bad scene" in capsys.readouterr().err
