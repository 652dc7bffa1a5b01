import numpy as np
import PIL.Image
import pytest

from render import main


def test_renders_single_image(tmp_path) -> None:
    output = tmp_path / "mandelbrot.png"
    assert main(["--width", "30", "--height", "20", "--output", str(output)]) == 0

    with PIL.Image.open(output) as image:
        assert image.size == (30, 20)
        pixels = np.asarray(image)
    assert set(np.unique(pixels)) == {0, 255}


def test_output_suffix_follows_format(tmp_path) -> None:
    main([
        "--width", "8", "--height", "8",
        "--classifier", "polka_dots", "--param", "zoom=2",
        "--format", "bmp", "--output", str(tmp_path / "dots"),
    ])
    assert (tmp_path / "dots.bmp").exists()


def test_writes_zoom_frames(tmp_path) -> None:
    frame_dir = tmp_path / "frames"
    main([
        "--width", "10", "--height", "10",
        "--frames", "3", "--zoom-factor", "0.5",
        "--mode", "frames", "--frame-dir", str(frame_dir),
    ])
    assert sorted(path.name for path in frame_dir.iterdir()) == ["frame000.png", "frame001.png", "frame002.png"]


@pytest.mark.parametrize(
    "argv",
    [
        ["--map-width", "1:-1"],
        ["--width", "1"],
        ["--width", "0"],
        ["--height", "-3"],
        ["--frames", "2", "--final-zoom", "0", "--mode", "image"],
        ["--param", "precision"],
        ["--param", "colour=red"],
        ["--mode", "gif"],
        ["--mode", "video", "--frames", "2"],
        ["--center-x", "0.1"],
    ],
)
def test_bad_arguments_exit_with_usage_error(tmp_path, argv) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([*argv, "--output", str(tmp_path / "out.png")])
    assert excinfo.value.code == 2
