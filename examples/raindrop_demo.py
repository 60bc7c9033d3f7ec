#!/usr/bin/env python3
"""
Raindrop Demo -- chuk-mcp-terrain

Builds a synthetic valley as ASCII Grid text, loads it with a small point
budget so it is split into tiles, then drops rain at a few places and
prints where each drop flows. No network access or input files needed.

Usage:
    python examples/raindrop_demo.py
"""

import asyncio

import numpy as np

from tool_runner import ToolRunner

NCOLS, NROWS = 40, 30
CELLSIZE = 25.0


def make_valley() -> str:
    """A tilted V-shaped valley draining towards the south-west corner."""
    cols, rows = np.meshgrid(np.arange(NCOLS), np.arange(NROWS))
    z = 200.0 + 3.0 * np.abs(cols - NCOLS / 2) + 2.0 * rows + 0.5 * cols
    z[0, 0] = -9999.0
    header = [
        f"ncols {NCOLS}",
        f"nrows {NROWS}",
        "xllcorner 512000",
        "yllcorner 174000",
        f"cellsize {CELLSIZE}",
        "NODATA_value -9999",
    ]
    body = [" ".join(f"{v:.1f}" for v in row) for row in z]
    return "\n".join(header + body) + "\n"


async def main() -> None:
    runner = ToolRunner(max_points_per_tile=400)

    print("=" * 60)
    print("chuk-mcp-terrain -- Raindrop Flow")
    print("=" * 60)

    loaded = await runner.run("terrain_load_dem", content=make_valley(), name="valley.asc")
    print(f"\n{loaded['message']} (split={loaded['split']})")
    print(f"Origin: {loaded['origin']}")

    print("\n" + await runner.run_text("terrain_list_tiles"))

    # Drop rain on the centre of every tile
    for tile in loaded["tiles"]:
        detail = await runner.run("terrain_describe_tile", tile_id=tile["id"])
        (x0, y0, _), (x1, y1, _) = detail["world_bounds"]
        x, y = (x0 + x1) / 2, (y0 + y1) / 2
        path = await runner.run("terrain_raindrop_path", tile_id=tile["id"], x=x, y=y)
        if not path["points"]:
            print(f"{tile['name']}: no path ({path['termination']})")
            continue
        start, end = path["points"][0], path["points"][-1]
        print(
            f"{tile['name']}: {path['steps']:3d} step(s), "
            f"{start[2]:.1f}m -> {end[2]:.1f}m, {path['termination']}"
        )

    # Round trip between scene points and cells
    first = loaded["tiles"][0]["id"]
    cell = await runner.run("terrain_world_to_grid", tile_id=first, x=0.0, y=0.0)
    print(f"\n{cell['message']}")
    point = await runner.run(
        "terrain_grid_to_world", tile_id=first, col=cell["col"], row=cell["row"]
    )
    print(point.get("message", point.get("error")))

    export = await runner.run("terrain_export_tile", tile_id=first, preview_style="hillshade")
    print(f"\n{export.get('message', export.get('error'))}")


if __name__ == "__main__":
    asyncio.run(main())
