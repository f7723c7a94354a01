"""Deterministic artwork parameters derived from a seed token.

Each generator draws from :func:`arte.seed.create_seeded_random`, so the same
token always yields the same parameter object. Key order is stable because
it feeds token fingerprints.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from arte.seed import create_seeded_random, generate_token

log = logging.getLogger(__name__)

Params = Dict[str, Any]
Rand = Callable[[], float]

FLOAT_PRECISION = 4


def round_floats(value: Any, precision: int = FLOAT_PRECISION) -> Any:
    """Round non-integral floats (recursively) so identical inputs give identical tokens."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and not value.is_integer():
        return round(value, precision)
    if isinstance(value, list):
        return [round_floats(v, precision) for v in value]
    if isinstance(value, dict):
        return {k: round_floats(v, precision) for k, v in value.items()}
    return value


def _pick(rand: Rand, items: List[Any]) -> Any:
    return items[int(rand() * len(items))]


def _canvas(mobile: bool) -> Params:
    return {"canvasWidth": 400 if mobile else 630, "canvasHeight": 500 if mobile else 790}


_FLOW_PALETTES = [
    {
        "backgrounds": ["#000000", "#0a0a0a", "#0f0f0f", "#1a1a1a"],
        "strokes": ["#ffffff", "#f5f5f5", "#e8e8e8", "#d4d4d4", "#c0c0c0", "#faf8f3", "#f0ede6", "#e6e3dc"],
    },
    {
        "backgrounds": ["#1a1614", "#2b2520", "#0d0c0b", "#1e1b18"],
        "strokes": ["#e8d5c4", "#f4e8d9", "#d4c0ab", "#c9b59a", "#f0e6d2", "#dcc8b3"],
    },
    {
        "backgrounds": ["#0a0e27", "#1a1a2e", "#16213e", "#0f1419"],
        "strokes": ["#ff6b9d", "#c44569", "#f8b500", "#4a90e2", "#50c878", "#e94b3c"],
    },
    {
        "backgrounds": ["#001f3f", "#0a2f51", "#001a33", "#0d2b45"],
        "strokes": ["#7fcdcd", "#41b3d3", "#84fab0", "#8fd3f4", "#a8e6cf"],
    },
    {
        "backgrounds": ["#2d1b2e", "#1a1423", "#2a1a2e", "#1e1326"],
        "strokes": ["#ff6b9d", "#ffa07a", "#ffb6c1", "#ffd700", "#ff8c94"],
    },
]


def flow_params(token: str, mobile: bool = False) -> Params:
    rand = create_seeded_random(token)
    palette = _pick(rand, _FLOW_PALETTES)
    background = _pick(rand, palette["backgrounds"])
    colors = [_pick(rand, palette["strokes"]) for _ in range(5)]
    num_points = 350 if mobile else int(rand() * 300) + 250
    params: Params = {
        "numPoints": num_points,
        "backgroundFade": 5,
        "scaleValue": rand() * 0.015 + 0.002,
        "noiseSpeed": rand() * 0.001 + 0.0002,
        "movementDistance": int(rand() * 8) + 4,
        "gaussianMean": rand() * 0.2 + 0.4,
        "gaussianStd": rand() * 0.15 + 0.08,
        "minIterations": int(rand() * 30) + 40,
        "maxIterations": int(rand() * 50) + 60,
    }
    params["circleSize"] = 2 if mobile else int(rand() * 4) + 1
    params.update({
        "strokeWeightMin": rand() * 0.3 + 0.1,
        "strokeWeightMax": rand() * 1.5 + 0.5,
        "angleMultiplier1": int(rand() * 15) + 8,
        "angleMultiplier2": int(rand() * 15) + 8,
    })
    params.update(_canvas(mobile))
    params.update({"targetWidth": 800, "targetHeight": 1000})
    for i, color in enumerate(colors, start=1):
        params[f"color{i}"] = color
    params["backgroundColor"] = background
    params.update({"exportWidth": 1600, "exportHeight": 2000, "isAnimating": True, "token": token})
    return params


_GRID_PALETTES = [
    ["#1B4332", "#52B788", "#2D6A4F", "#95D5B2", "#40916C", "#74C69D"],
    ["#001219", "#005f73", "#0a9396", "#94d2bd", "#e9d8a6", "#ee9b00"],
    ["#2b2d42", "#8d99ae", "#edf2f4", "#ef233c", "#d90429", "#2b2d42"],
]


def grid_params(token: str, mobile: bool = False) -> Params:
    rand = create_seeded_random(token)
    p = _pick(rand, _GRID_PALETTES)
    params: Params = {
        "backgroundColor": p[0],
        "borderColor": p[1],
        "color1": p[2],
        "color2": p[3],
        "color3": p[4],
        "color4": p[5],
        "animationSpeed": rand() * 0.1 + 0.02,
        "maxDepth": int(rand() * 3) + 1,
        "minModuleSize": int(rand() * 30) + 20,
        "subdivideChance": rand() * 0.5 + 0.3,
        "crossSize": rand() * 0.5 + 0.4,
        "minColumns": int(rand() * 4) + 3,
        "maxColumns": int(rand() * 8) + 6,
    }
    params.update(_canvas(mobile))
    params.update({"isAnimating": True, "token": token, "exportWidth": 1600, "exportHeight": 2000})
    return params


_MOSAIC_PALETTES = [
    ["#A8DADC", "#E63946", "#457B9D", "#1D3557"],
    ["#264653", "#2a9d8f", "#e9c46a", "#f4a261"],
    ["#cdb4db", "#ffc8dd", "#ffafcc", "#bde0fe"],
]


def mosaic_params(token: str, mobile: bool = False) -> Params:
    rand = create_seeded_random(token)
    p = _pick(rand, _MOSAIC_PALETTES)
    params: Params = {f"color{i}": c for i, c in enumerate(p, start=1)}
    params.update({
        "initialRectMinSize": rand() * 0.4 + 0.6,
        "initialRectMaxSize": 1.0,
        "gridDivisionChance": rand() * 0.3,
        "recursionChance": rand() * 0.3,
        "minGridRows": int(rand() * 3) + 1,
        "maxGridRows": int(rand() * 4) + 2,
        "minGridCols": int(rand() * 3) + 2,
        "maxGridCols": int(rand() * 5) + 3,
        "splitRatioMin": rand() * 0.3 + 0.1,
        "splitRatioMax": rand() * 0.4 + 0.5,
        "marginMultiplier": rand() * 0.08 + 0.01,
        "detailGridMin": int(rand() * 3) + 2,
        "detailGridMax": int(rand() * 4) + 4,
        "noiseDensity": rand() * 0.15,
        "minRecursionSize": int(rand() * 20) + 10,
    })
    params.update(_canvas(mobile))
    params.update({"token": token, "exportWidth": 1600, "exportHeight": 2000})
    return params


_ROTATED_PALETTES = [
    ["#FF1493", "#FF69B4", "#FFB7C5", "#C71585", "#2C1810"],
    ["#ffbe0b", "#fb5607", "#ff006e", "#8338ec", "#3a86ff"],
    ["#000000", "#14213d", "#fca311", "#e5e5e5", "#ffffff"],
]


def rotated_params(token: str, mobile: bool = False) -> Params:
    rand = create_seeded_random(token)
    p = _pick(rand, _ROTATED_PALETTES)
    params: Params = {f"color{i}": c for i, c in enumerate(p[:4], start=1)}
    params.update({
        "backgroundColor": p[4],
        "offsetRatio": rand() * 0.04 + 0.005,
        "marginRatio": rand() * 0.4 + 0.3,
        "minCellCount": int(rand() * 3) + 1,
        "maxCellCount": int(rand() * 5) + 4,
        "minRecursionSize": rand() * 0.04 + 0.01,
        "strokeWeight": rand() * 4 + 1,
    })
    params.update(_canvas(mobile))
    params.update({"token": token, "exportWidth": 1600, "exportHeight": 2000})
    return params


_TREE_PALETTES = [
    ["#8B4513", "#A0522D", "#CD853F", "#FF69B4", "#FFB6C1", "#FFC0CB", "#000000"],
    ["#2f3e46", "#354f52", "#52796f", "#84a98c", "#cad2c5", "#f0f3bd", "#2f3e46"],
    ["#5f0f40", "#9a031e", "#fb8b24", "#e36414", "#0f4c5c", "#5f0f40", "#000000"],
]


def tree_params(token: str, mobile: bool = False) -> Params:
    rand = create_seeded_random(token)
    p = _pick(rand, _TREE_PALETTES)
    params: Params = {"initialPaths": int(rand() * 3) + 1}
    params["initialVelocity"] = 10 if mobile else rand() * 5 + 10
    params.update({
        "branchProbability": rand() * 0.15 + 0.1,
        "diameterShrink": rand() * 0.1 + 0.6,
        "minDiameter": rand() * 0.2 + 0.1,
        "bumpMultiplier": rand() * 0.2 + 0.1,
        "velocityRetention": rand() * 0.2 + 0.7,
        "speedMin": rand() * 3 + 3,
        "speedMax": rand() * 5 + 8,
        "finishedCircleSize": rand() * 8 + 6,
        "strokeWeightMultiplier": rand() * 0.5 + 1,
        "stemColor1": p[0],
        "stemColor2": p[1],
        "stemColor3": p[2],
        "tipColor1": p[3],
        "tipColor2": p[4],
        "tipColor3": p[5],
        "backgroundColor": p[6],
        "textContent": "",
        "textEnabled": True,
        "fontSize": 24,
        "textColor": "#ff1f1f",
        "textAlign": "center",
        "textX": 200 if mobile else 311,
        "textY": 50,
        "lineHeight": 1.5,
        "fontFamily": "Georgia",
        "customFontFamily": "",
        "grainAmount": int(rand() * 50) + 20,
    })
    params.update(_canvas(mobile))
    params.update({"token": token, "exportWidth": 1600, "exportHeight": 2000, "isAnimating": True})
    return params


_TEXT_PALETTES = [
    ["#001ef1", "#FF9900", "#ff0000", "#fff4b8", "#D10000"],
    ["#2b2d42", "#8d99ae", "#edf2f4", "#ef233c", "#d90429"],
    ["#000000", "#ffffff", "#ff006e", "#8338ec", "#3a86ff"],
]


def _text_layer(p: List[str], text: str, x: float, y: float, size: int, outline: int) -> Params:
    return {
        "text": text,
        "x": x,
        "y": y,
        "size": size,
        "alignment": "center",
        "fill": p[1],
        "extrudeDepth": 12,
        "extrudeX": 1.0,
        "extrudeY": 1.0,
        "extrudeStart": p[4],
        "extrudeEnd": p[4],
        "highlight": p[3],
        "showHighlight": False,
        "outlineThickness": outline,
        "outlineColor": p[4],
    }


def text_params(token: str, mobile: bool = False) -> Params:
    rand = create_seeded_random(token)
    p = _pick(rand, _TEXT_PALETTES)
    params: Params = {"backgroundColor": p[0]}
    params.update(_canvas(mobile))
    params["grainAmount"] = int(rand() * 30) + 10
    params["customFontFamily"] = "Noto Sans Bengali"

    # Draw order matters: it decides which random numbers each field gets
    layer1 = _text_layer(p, "ARTE", 0.5, 0.5, int(rand() * 40) + 50, 0)
    layer1["extrudeDepth"] = int(rand() * 10) + 2
    layer1["extrudeX"] = rand() * 4 - 2
    layer1["extrudeY"] = rand() * 4 - 2
    layer1["extrudeStart"] = p[2]
    layer1["extrudeEnd"] = p[2]
    layer1["showHighlight"] = rand() > 0.5

    params["layer1"] = layer1
    params["layer2"] = _text_layer(p, "", 0.3, 0.68, 60, 4)
    params["layer3"] = _text_layer(p, "", 0.55, 0.68, 100, 4)
    params.update({"token": token, "exportWidth": 1600, "exportHeight": 2000})
    return params


GENERATORS: Dict[str, Callable[..., Params]] = {
    "flow": flow_params,
    "grid": grid_params,
    "mosaic": mosaic_params,
    "rotated": rotated_params,
    "tree": tree_params,
    "text": text_params,
}

TITLES = {
    "flow": ("Flow Field", "Generative flow particles"),
    "grid": ("Grid System", "Structured chaos"),
    "mosaic": ("Mosaic", "Tiled patterns"),
    "rotated": ("Rotated Grid", "Angular compositions"),
    "tree": ("Recursive Tree", "Organic growth algorithms"),
    "text": ("Text Design", "Typography experiments"),
}

# Palette keys carried over when an artwork is regenerated with a new token
_KEEP_ON_REGENERATE = {
    "mosaic": ("color1", "color2", "color3", "color4"),
    "rotated": ("color1", "color2", "color3", "color4", "backgroundColor"),
    "tree": (
        "canvasWidth", "canvasHeight",
        "stemColor1", "stemColor2", "stemColor3",
        "tipColor1", "tipColor2", "tipColor3",
        "backgroundColor",
    ),
}


def generate_params(artwork_type: str, token: str, mobile: bool = False) -> Params:
    try:
        gen = GENERATORS[artwork_type]
    except KeyError:
        raise ValueError(f"unknown artwork type: {artwork_type!r}") from None
    return round_floats(gen(token, mobile=mobile))


def random_params(artwork_type: str, mobile: bool = False) -> Params:
    return generate_params(artwork_type, generate_token(), mobile=mobile)


def regenerate(artwork_type: str, current: Params, mobile: bool = False) -> Params:
    """New layout from a fresh token, keeping the current palette where the type allows it."""
    keep = _KEEP_ON_REGENERATE.get(artwork_type)
    params = random_params(artwork_type, mobile=mobile)
    if not keep:
        return params
    new_token = params.pop("token")
    params["colorSeed"] = current.get("colorSeed") or current.get("token")
    for key in keep:
        if key in current:
            params[key] = current[key]
    params["token"] = new_token
    log.debug("generators.regenerate: type=%s kept=%d", artwork_type, len(keep))
    return params
