import logging
import sys
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import imageio
import numpy as np
import PIL.Image

from fractalmap import (
    ArrayPixelSink,
    ConfigurationError,
    RasterRenderer,
    classifier_names,
    compute_zoom_factors,
    make_classifier,
    parse_range,
    render_zoom_sequence,
)
from fractalmap.sinks import pil_format_name

_VERBOSE_FLAGS = {"--verbose", "-v"}
VERBOSE = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    gif_path: Path | None
    image_path: Path | None
    frame_dir: Path | None
    image_format: str


def build_parser():
    parser = ArgumentParser(description="Render a binary fractal map to an image, GIF or frame sequence.")

    parser.add_argument('--width', type=int,
                        dest='width', help='raster width in pixels',
                        metavar='WIDTH', default=512)

    parser.add_argument('--height', type=int,
                        dest='height', help='raster height in pixels',
                        metavar='HEIGHT', default=512)

    parser.add_argument('--map-width', type=str,
                        dest='map_width', help='horizontal boundaries of the mapped plane as min:max',
                        metavar='MIN:MAX', default='-2:1')

    parser.add_argument('--map-height', type=str,
                        dest='map_height', help='vertical boundaries of the mapped plane as min:max',
                        metavar='MIN:MAX', default='-1:1')

    parser.add_argument('--classifier', type=str, choices=classifier_names(),
                        dest='classifier', help='point classifier painted over the map',
                        default='convergence_test')

    parser.add_argument('--param', dest='params', action='append', metavar='KEY=VALUE',
                        help='override a classifier parameter, e.g. precision=50. May be repeated.')

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of zoom frames to render; 0 renders a single image',
                        metavar='FRAMES', default=0)

    parser.add_argument('--zoom-factor', type=float,
                        dest='zoom_factor', help='factor applied to the window size each frame. Choose < 1 for zoom in, > 1 for zoom out',
                        metavar='ZOOM_FACTOR', default=0.8)

    parser.add_argument('--final-zoom', type=float, default=None,
                        help='overall scale reached by the last frame (e.g. 1e-3). If set, overrides --zoom-factor.')

    parser.add_argument('--easing', type=str, default='ease', choices=['ease', 'linear'],
                        help='curve used to spread --final-zoom across the frames.')

    parser.add_argument('--center-x', type=float, default=None,
                        help='x coordinate the zoom converges on (defaults to the middle of the map).')

    parser.add_argument('--center-y', type=float, default=None,
                        help='y coordinate the zoom converges on (defaults to the middle of the map).')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='output modes to generate. May be repeated. Choices: image, gif, frames.')

    parser.add_argument('--output', dest='output', type=str,
                        help='destination file for a single file-based mode, or directory when both gif and image are requested.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='directory in which to store the frame sequence.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image outputs. Any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable verbose progress output and debug logging.')

    return parser


def parse_params(values, parser: ArgumentParser) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            parser.error(f"--param expects KEY=VALUE, got '{item}'.")
        params[key.strip()] = value.strip()
    return params


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    valid_modes = {"gif", "image", "frames"}
    modes: list[str] = []
    for mode in opt.modes or ["image" if opt.frames == 0 else "gif"]:
        if mode not in valid_modes:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")
        if mode not in modes:
            modes.append(mode)
    modes_set = set(modes)

    if opt.frames == 0 and modes_set & {"gif", "frames"}:
        parser.error("gif and frames modes require --frames greater than 0.")

    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    frame_dir: Path | None = None
    if "frames" in modes_set:
        frame_dir = Path(opt.frame_dir or "./frames").expanduser().resolve()
    elif opt.frame_dir is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    file_modes = [mode for mode in modes if mode in {"gif", "image"}]
    gif_path: Path | None = None
    image_path: Path | None = None

    if len(file_modes) == 1:
        mode = file_modes[0]
        suffix = ".gif" if mode == "gif" else f".{image_format}"
        if opt.output:
            output_path = Path(opt.output).expanduser()
            if output_path.is_dir():
                parser.error("--output must point to a file when a single file mode is active.")
            if not output_path.suffix:
                output_path = output_path.with_suffix(suffix)
            elif output_path.suffix.lower() != suffix:
                parser.error(f"--output extension {output_path.suffix} does not match {suffix.lstrip('.')} output.")
        else:
            output_path = Path("movie.gif" if mode == "gif" else f"fractal{suffix}")
        if mode == "gif":
            gif_path = output_path.resolve()
        else:
            image_path = output_path.resolve()
    elif file_modes:
        base_dir = Path(opt.output).expanduser() if opt.output else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "movie.gif").resolve()
        image_path = (base_dir / f"fractal.{image_format}").resolve()
    elif opt.output:
        parser.error("--output is only valid when gif or image modes are requested.")

    return OutputConfig(
        modes=tuple(modes),
        gif_path=gif_path,
        image_path=image_path,
        frame_dir=frame_dir,
        image_format=image_format,
    )


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format_name(image_format))


def write_frame_sequence(
    image: PIL.Image.Image,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"frame{index:0{digits}d}.{image_format}"
    frame_dir.mkdir(parents=True, exist_ok=True)
    image.save(str(frame_path), format=pil_format_name(image_format))
    return frame_path


def write_gif(writer: Any, frame_array: np.ndarray) -> None:
    """Append ``frame_array`` to an active GIF writer."""

    writer.append_data(np.stack((frame_array,) * 3, axis=-1))


class OutputWriters:
    def __init__(self, config: OutputConfig, frame_digits: int) -> None:
        self.config = config
        self.frame_digits = frame_digits
        self._gif_writer = None
        if config.gif_path is not None:
            config.gif_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(str(config.gif_path), mode='I', duration=0.1, loop=0)

    def write_frame(self, frame_index: int, frame_array: np.ndarray) -> None:
        if self._gif_writer is not None:
            write_gif(self._gif_writer, frame_array)
        if self.config.frame_dir is not None:
            write_frame_sequence(
                PIL.Image.fromarray(frame_array),
                self.config.frame_dir,
                frame_index,
                self.frame_digits,
                self.config.image_format,
            )

    def finalize(self, final_frame: np.ndarray | None) -> None:
        if self.config.image_path is not None and final_frame is not None:
            write_single_image(PIL.Image.fromarray(final_frame), self.config.image_path, self.config.image_format)
            log("Wrote %s" % self.config.image_path)

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            log("Wrote %s" % self.config.gif_path)
            self._gif_writer = None


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    logging.basicConfig(
        level=logging.DEBUG if VERBOSE else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if opt.frames < 0:
        parser.error("--frames must not be negative.")
    if (opt.center_x is None) != (opt.center_y is None):
        parser.error("--center-x and --center-y must be given together.")

    output_config = resolve_output_config(opt, parser)
    params = parse_params(opt.params, parser)

    try:
        sink = ArrayPixelSink(opt.width, opt.height)
        classifier = make_classifier(opt.classifier, **params)
        renderer = RasterRenderer(sink, parse_range(opt.map_width), parse_range(opt.map_height), classifier)
        factors = compute_zoom_factors(opt.frames, opt.zoom_factor, final_zoom=opt.final_zoom, easing=opt.easing)
    except ConfigurationError as exc:
        parser.error(str(exc))

    log("Rendering %s over x=%s y=%s at %dx%d" % (
        classifier, renderer.width_range.as_tuple(), renderer.height_range.as_tuple(), opt.width, opt.height))

    if opt.frames == 0:
        renderer.draw()
        write_single_image(sink.to_image(), output_config.image_path, output_config.image_format)
        log("Wrote %s" % output_config.image_path)
        return 0

    center = (opt.center_x, opt.center_y) if opt.center_x is not None else None
    frame_digits = max(3, len(str(max(opt.frames - 1, 0))))
    writers = OutputWriters(output_config, frame_digits)

    final_frame = None
    try:
        for i, frame in enumerate(render_zoom_sequence(renderer, factors, center)):
            log("frame {0} out of {1}".format(i, opt.frames), end='\r')
            writers.write_frame(i, frame)
            final_frame = frame
    except ConfigurationError as exc:
        parser.error(str(exc))
    finally:
        writers.close()

    writers.finalize(final_frame)
    return 0


if __name__ == '__main__':
    sys.exit(main())
