"""Command line entry point for spritecore."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageDraw

from .config import Configuration
from .core.geometry import QUAD_INDICES, QUAD_VERTICES, projection_matrix
from .errors import SpriteCoreError
from .scene.loader import Scene, SceneLoader

logger = logging.getLogger(__name__)

# Preview fill colors, picked by texture index
PREVIEW_PALETTE = [
    (70, 130, 180),
    (205, 92, 92),
    (60, 179, 113),
    (238, 173, 14),
    (147, 112, 219),
    (72, 209, 204),
]


def clip_to_pixels(
    clip: NDArray[np.floating], size: tuple[int, int]
) -> NDArray[np.float64]:
    """Convert clip-space x/y to image pixel coordinates (y down)."""
    width, height = size
    clip = np.asarray(clip, dtype=np.float64)
    return np.column_stack([
        (clip[:, 0] + 1.0) * 0.5 * width,
        (1.0 - clip[:, 1]) * 0.5 * height,
    ])


def render_preview(
    vertices: NDArray[np.void], size: tuple[int, int]
) -> Image.Image:
    """Rasterize a packed vertex buffer into a flat-shaded preview image.

    Quads are drawn in buffer order, which is back-to-front.
    """
    image = Image.new("RGB", size, (24, 24, 32))
    draw = ImageDraw.Draw(image)
    corners = len(QUAD_VERTICES)

    for start in range(0, len(vertices), corners):
        quad = vertices[start:start + corners]
        pixels = clip_to_pixels(quad["position"], size)
        fill = PREVIEW_PALETTE[int(quad["texture_index"][0]) % len(PREVIEW_PALETTE)]
        draw.polygon([tuple(p) for p in pixels], fill=fill, outline=(255, 255, 255))

    return image


def describe_scene(scene: Scene, size: tuple[float, float]) -> None:
    """Print every component with its model matrix and world-space corners."""
    print("Spritecore - 2D Sprite Quad Geometry")
    print("=" * 40)
    print(f"Viewport: {size[0]:g}x{size[1]:g}")
    components = scene.component_manager.components
    print(f"Scene contains {len(components)} components, "
          f"{len(scene.entity_manager.entities)} entities:")
    for entity in scene.entity_manager.entities:
        print(f"- {entity.entity_type.label} {entity.id}: components {entity.components}")

    for component in components:
        data = component.component_data
        model = data.transformation_matrix()
        local = np.hstack([QUAD_VERTICES, np.ones((len(QUAD_VERTICES), 1))])
        world = (model @ local.T).T[:, :2]
        corners = ", ".join(f"({x:g}, {y:g})" for x, y in world)
        print(f"  [{component.id}] {component.component_type.label} "
              f"layer={data.layer.name.capitalize()} corners: {corners}")


def parse_size(text: str) -> tuple[float, float]:
    try:
        width, height = (float(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WxH, got {text!r}") from None
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("viewport size must be positive")
    return width, height


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Spritecore - project a 2D sprite scene",
    )
    parser.add_argument("scene", metavar="SCENE", help="Scene YAML file")
    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        default="config.yaml",
        help="Configuration file (default: config.yaml, defaults if absent)",
    )
    parser.add_argument(
        "--size",
        metavar="WxH",
        type=parse_size,
        help="Viewport size, overriding the configured window size",
    )
    parser.add_argument(
        "-r", "--render",
        metavar="PATH",
        help="Render a flat-shaded preview of the projected quads to PNG",
    )
    parser.add_argument(
        "-e", "--export",
        metavar="PATH",
        help="Save the vertex, index and projection buffers to an .npz file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the spritecore CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = Configuration.load_or_default(args.config)
        scene = SceneLoader().load(args.scene)
    except (OSError, SpriteCoreError) as err:
        logger.error("%s", err)
        return 1

    size = args.size or config.window_size
    projection = projection_matrix(size)
    describe_scene(scene, size)

    batch = scene.component_manager.build_batch(spritesheets=scene.spritesheets)
    vertices, indices = batch.build(projection)
    print(f"\nVertex buffer: {len(vertices)} vertices, "
          f"index buffer: {len(indices)} indices "
          f"({len(indices) // len(QUAD_INDICES)} quads)")

    if args.export:
        output_path = Path(args.export)
        np.savez(output_path, vertices=vertices, indices=indices, projection=projection)
        print(f"Saved buffers to {output_path}")

    if args.render:
        output_path = Path(args.render)
        pixel_size = (int(round(size[0])), int(round(size[1])))
        render_preview(vertices, pixel_size).save(str(output_path))
        print(f"Saved preview to {output_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
