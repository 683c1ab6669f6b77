"""
Prompt Tables
=============

Keyword classifier and the fixed visual-language phrase tables used to
compose scene prompts. The keyword patterns are plain substring matches and
are checked in order; the first matching category wins.
"""

import re
from types import MappingProxyType
from typing import Mapping, Pattern, Tuple, Union

from .models import SceneType, VideoStyle, style_value


SCENE_KEYWORDS: Tuple[Tuple[SceneType, Pattern], ...] = (
    (SceneType.FACE_CLOSEUP, re.compile(r"face|portrait|closeup|expression|emotion|eyes|smile", re.IGNORECASE)),
    (SceneType.PEOPLE, re.compile(r"person|people|human|man|woman|crowd|group", re.IGNORECASE)),
    (SceneType.DIALOGUE, re.compile(r"talking|speaking|dialogue|conversation|interview", re.IGNORECASE)),
    (SceneType.LANDSCAPE, re.compile(r"landscape|nature|mountain|ocean|sky|forest|field|sunset|sunrise", re.IGNORECASE)),
    (SceneType.ESTABLISHING, re.compile(r"city|building|street|urban|architecture|skyline", re.IGNORECASE)),
    (SceneType.PRODUCT, re.compile(r"product|item|object|device|gadget|tool", re.IGNORECASE)),
    (SceneType.ACTION, re.compile(r"action|running|jumping|fighting|sport|race|chase", re.IGNORECASE)),
    (SceneType.FAST_MOTION, re.compile(r"fast|speed|motion|blur|quick", re.IGNORECASE)),
    (SceneType.ARTISTIC, re.compile(r"art|abstract|creative|animation|cartoon|stylized", re.IGNORECASE)),
    (SceneType.TEXT_OVERLAY, re.compile(r"text|title|logo|graphics|overlay", re.IGNORECASE)),
)

DEFAULT_SCENE_TYPE = SceneType.GENERIC_FOOTAGE


SCENE_TYPE_PHRASES: Mapping[SceneType, str] = MappingProxyType({
    SceneType.LANDSCAPE: "wide shot, panoramic, beautiful scenery, golden hour",
    SceneType.ESTABLISHING: "establishing shot, wide angle, setting the scene",
    SceneType.FACE_CLOSEUP: "close-up shot, detailed facial features, emotional, expressive",
    SceneType.PEOPLE: "medium shot, natural poses, authentic movement",
    SceneType.DIALOGUE: "two-shot, conversation, natural interaction",
    SceneType.ARTISTIC: "creative composition, artistic interpretation, visually striking",
    SceneType.ANIMATION: "smooth animation, fluid motion, stylized",
    SceneType.PRODUCT: "product photography, clean background, professional lighting, detailed",
    SceneType.OBJECT_CLOSEUP: "macro shot, detailed texture, shallow depth of field",
    SceneType.ACTION: "dynamic shot, motion, energy, excitement",
    SceneType.FAST_MOTION: "speed ramping, motion blur, high energy",
    SceneType.TRANSITION: "smooth transition, flowing movement",
    SceneType.GENERIC_FOOTAGE: "supplementary footage, atmospheric, mood-setting",
    SceneType.TEXT_OVERLAY: "clean space for text, balanced composition",
})


STYLE_PHRASES: Mapping[str, str] = MappingProxyType({
    VideoStyle.CINEMATIC.value: (
        "cinematic, film grain, dramatic lighting, anamorphic lens flare, depth of field, "
        "35mm film, color graded, professional cinematography"
    ),
    VideoStyle.DOCUMENTARY.value: (
        "documentary style, natural lighting, authentic, candid, handheld camera feel, "
        "realistic, observational"
    ),
    VideoStyle.TUTORIAL.value: (
        "clean, well-lit, educational, clear visuals, professional, instructional, easy to follow"
    ),
    VideoStyle.PROMOTIONAL.value: (
        "polished, vibrant colors, dynamic, engaging, commercial quality, brand-focused, "
        "high production value"
    ),
    VideoStyle.ENTERTAINMENT.value: (
        "fun, energetic, colorful, engaging, fast-paced, attention-grabbing, viral potential"
    ),
    VideoStyle.ARTISTIC.value: (
        "artistic, creative, unique perspective, experimental, visually striking, avant-garde, aesthetic"
    ),
})


def detect_scene_type(text: str) -> SceneType:
    """Classify free text into a SceneType by keyword matching."""
    for scene_type, pattern in SCENE_KEYWORDS:
        if pattern.search(text):
            return scene_type
    return DEFAULT_SCENE_TYPE


def build_scene_prompt(
    description: str,
    style: Union[VideoStyle, str, None],
    scene_type: SceneType,
) -> str:
    """Compose base description, type phrase and style phrase into one prompt."""
    parts = [
        description.strip(),
        SCENE_TYPE_PHRASES.get(scene_type, ""),
        STYLE_PHRASES.get(style_value(style), ""),
    ]
    return ", ".join(part for part in parts if part)
