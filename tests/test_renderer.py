import threading

import pytest

from fractalmap import (
    BuggyVariant,
    Color,
    ConfigurationError,
    FractalMapOptions,
    PixelSink,
    Range,
    RasterRenderer,
    convergence_test,
)


class RecordingSink:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.writes: list[tuple[int, int, Color]] = []

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self.writes.append((x, y, color))

    def colors(self) -> dict[tuple[int, int], Color]:
        return {(x, y): color for x, y, color in self.writes}


def left_half(x: float, y: float) -> bool:
    return x < 0


def test_recording_sink_is_a_pixel_sink() -> None:
    assert isinstance(RecordingSink(2, 2), PixelSink)


def test_construction_validates_without_drawing() -> None:
    sink = RecordingSink(4, 4)
    renderer = RasterRenderer(sink, (-1, 1), (-1, 1), left_half)
    assert renderer.draw_count == 0
    assert sink.writes == []
    assert renderer.width_range == Range(-1.0, 1.0)

    renderer.draw()
    assert renderer.draw_count == 1
    assert len(sink.writes) == 16


def test_default_classifier_is_buggy_variant() -> None:
    renderer = RasterRenderer(RecordingSink(3, 3))
    assert renderer.classifier == BuggyVariant()
    assert renderer.height_range == Range(-1.0, 1.0)


def test_draw_writes_every_pixel_once_in_binary() -> None:
    sink = RecordingSink(5, 4)
    renderer = RasterRenderer(sink, (-1, 1), (-1, 1), left_half)
    renderer.draw()

    assert renderer.draw_count == 1
    assert len(sink.writes) == 20
    assert len(sink.colors()) == 20
    assert {color for _, _, color in sink.writes} <= {Color.BLACK, Color.WHITE}
    colors = sink.colors()
    assert colors[(0, 0)] is Color.WHITE
    assert colors[(1, 3)] is Color.WHITE
    assert colors[(2, 0)] is Color.BLACK
    assert colors[(4, 3)] is Color.BLACK


def test_draw_mandelbrot_on_small_raster() -> None:
    sink = RecordingSink(3, 3)
    RasterRenderer(sink, (-2, 1), (-1, 1), convergence_test).draw()
    white = sorted(pixel for pixel, color in sink.colors().items() if color is Color.WHITE)
    assert white == [(0, 1), (1, 1)]


def test_color_values() -> None:
    assert Color.BLACK.value == "#000000"
    assert Color.WHITE.value == "#ffffff"


def test_set_boundaries_without_arguments_never_redraws() -> None:
    sink = RecordingSink(3, 3)
    renderer = RasterRenderer(sink, (-1, 1), (-1, 1), left_half)
    renderer.draw()
    renderer.set_boundaries()
    renderer.set_boundaries(None, None)
    assert renderer.draw_count == 1
    assert len(sink.writes) == 9


def test_set_boundaries_width_only_redraws_once() -> None:
    sink = RecordingSink(3, 3)
    renderer = RasterRenderer(sink, (-2, 1), (-1, 1), left_half)
    renderer.set_boundaries((0.5, 2.5))

    assert renderer.draw_count == 1
    assert renderer.width_range == Range(0.5, 2.5)
    assert renderer.height_range == Range(-1.0, 1.0)
    points = list(renderer.mapper.samples())
    assert (points[0].mapped_x, points[0].mapped_y) == (0.5, -1.0)
    assert (points[-1].mapped_x, points[-1].mapped_y) == pytest.approx((2.5, 1.0))
    assert all(color is Color.BLACK for _, _, color in sink.writes)


def test_set_boundaries_height_only_keeps_width() -> None:
    renderer = RasterRenderer(RecordingSink(3, 3), (-2, 1), (-1, 1), left_half)
    renderer.set_boundaries(height_range=Range(0.0, 4.0))
    assert renderer.draw_count == 1
    assert renderer.width_range == Range(-2.0, 1.0)
    assert renderer.height_range == Range(0.0, 4.0)


def test_resupplying_same_boundaries_still_redraws() -> None:
    renderer = RasterRenderer(RecordingSink(3, 3), (-2, 1), (-1, 1), left_half)
    renderer.set_boundaries((-2, 1), (-1, 1))
    assert renderer.draw_count == 1


def test_configure_replaces_everything_and_redraws() -> None:
    sink = RecordingSink(3, 3)
    renderer = RasterRenderer(sink, (-1, 1), (-1, 1), left_half)
    renderer.configure((1, 2), (3, 4), lambda x, y: True)

    assert renderer.draw_count == 1
    assert renderer.width_range == Range(1.0, 2.0)
    assert renderer.height_range == Range(3.0, 4.0)
    assert all(color is Color.WHITE for _, _, color in sink.writes)


@pytest.mark.parametrize("width_range", [(1, -1), (0, 0), "x"])
def test_invalid_boundaries_fail_before_any_pixel_is_written(width_range) -> None:
    sink = RecordingSink(3, 3)
    renderer = RasterRenderer(sink, (-1, 1), (-1, 1), left_half)
    with pytest.raises(ConfigurationError):
        renderer.set_boundaries(width_range)
    with pytest.raises(ConfigurationError):
        renderer.configure(width_range, (-1, 1), left_half)
    assert sink.writes == []
    assert renderer.draw_count == 0
    assert renderer.width_range == Range(-1.0, 1.0)


def test_configure_rejects_non_callable_classifier() -> None:
    renderer = RasterRenderer(RecordingSink(3, 3))
    with pytest.raises(ConfigurationError):
        renderer.configure((-1, 1), (-1, 1), "mandelbrot")


@pytest.mark.parametrize("width, height", [(1, 10), (10, 1)])
def test_degenerate_sink_is_rejected(width, height) -> None:
    with pytest.raises(ConfigurationError):
        RasterRenderer(RecordingSink(width, height), (-1, 1), (-1, 1), left_half)


def test_from_options() -> None:
    options = FractalMapOptions().merge(map_width=(-2, 1), classifier=left_half)
    renderer = RasterRenderer.from_options(RecordingSink(4, 4), options)
    assert renderer.width_range == Range(-2.0, 1.0)
    assert renderer.height_range == Range(-1.0, 1.0)
    assert renderer.classifier is left_half


def test_boundary_change_waits_for_in_flight_draw() -> None:
    drawing = threading.Event()
    release = threading.Event()
    seen_ranges = []

    def blocking(x: float, y: float) -> bool:
        if not drawing.is_set():
            drawing.set()
            release.wait(timeout=5)
        return True

    sink = RecordingSink(3, 3)
    renderer = RasterRenderer(sink, (-1, 1), (-1, 1), blocking)
    drawer = threading.Thread(target=renderer.draw)
    drawer.start()
    assert drawing.wait(timeout=5)

    changer = threading.Thread(target=lambda: renderer.set_boundaries((5, 6)))
    changer.start()
    changer.join(timeout=0.2)
    seen_ranges.append(renderer.width_range)
    release.set()
    drawer.join(timeout=5)
    changer.join(timeout=5)

    assert seen_ranges == [Range(-1.0, 1.0)]
    assert renderer.width_range == Range(5.0, 6.0)
    assert renderer.draw_count == 2
    assert len(sink.writes) == 18
