"""Short-form video (Reels/Shorts/TikTok) scriptwriter."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction

DEFINITION = ToolDefinition(
    id="reels-scripts",
    name="Reels/Shorts Scriptwriter",
    description="Hook-first short video scripts per platform",
    category="Video",
)

PLATFORM_SPECS: dict[str, tuple[str, str]] = {
    "instagram": ("9:16, up to 90s", "Use on-screen captions and trending audio"),
    "tiktok": ("9:16, 15-60s", "Hook in the first second; native text overlays"),
    "youtube": ("9:16, up to 60s", "Loopable ending; title with keyword"),
}


class ReelsScriptsInput(ToolInput):
    topic: str = Field(
        "a quick tip",
        validation_alias=AliasChoices("topic", "videoTopic", "subject"),
        serialization_alias="topic",
    )
    platforms: StrList = Field(default_factory=lambda: ["Instagram", "TikTok", "YouTube"])
    duration: str = "30 seconds"
    target_audience: str = Field(
        "social media users",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    style: str = "educational"
    call_to_action: str = "Follow for more"


class ScriptBeat(ToolOutput):
    timestamp: str
    visual: str
    voiceover: str
    on_screen_text: str


class ScriptVariation(ToolOutput):
    title: str
    hook: str
    beats: list[ScriptBeat]
    cta: str


class PlatformNote(ToolOutput):
    platform: str
    format: str
    tips: str


class AudioGuidance(ToolOutput):
    music_style: str
    voice_tone: str
    pacing: str


class ExportOption(ToolOutput):
    platform: str
    resolution: str
    aspect_ratio: str


class ReelsScriptsOutput(ToolOutput):
    script_variations: list[ScriptVariation]
    platform_specific: list[PlatformNote]
    visual_elements: list[str]
    audio_guidance: AudioGuidance
    optimization: list[str]
    export_options: list[ExportOption]


HOOK_STYLES = [
    ("Question hook", "Did you know most {audience} get {topic} wrong?"),
    ("Bold claim hook", "This one {topic} change saves hours every week."),
]


def _seconds(duration: str) -> int:
    digits = "".join(ch for ch in duration if ch.isdigit())
    return max(15, min(int(digits), 90)) if digits else 30


def build(data: ReelsScriptsInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "a short-form video scriptwriter",
        (
            f"Write {data.duration} {data.style} video scripts about {data.topic} for {data.target_audience} "
            f"on {', '.join(data.platforms)}."
        ),
        data,
        ReelsScriptsOutput,
        guidance=[
            "Give two scriptVariations with different hooks",
            "Beats carry timestamps that fit the requested duration",
            f"Close every script with: {data.call_to_action}",
        ],
    )


def fallback(data: ReelsScriptsInput) -> ReelsScriptsOutput:
    total = _seconds(data.duration)
    third = total // 3
    variations = []
    for name, hook_template in HOOK_STYLES:
        hook = hook_template.format(audience=data.target_audience, topic=data.topic)
        variations.append(
            ScriptVariation(
                title=f"{name}: {data.topic}",
                hook=hook,
                beats=[
                    ScriptBeat(timestamp="0-3s", visual="Close-up, direct to camera", voiceover=hook, on_screen_text=hook),
                    ScriptBeat(
                        timestamp=f"3-{third * 2}s",
                        visual="Quick cuts showing the steps",
                        voiceover=f"Here is how to handle {data.topic} in three steps.",
                        on_screen_text="Step 1 / Step 2 / Step 3",
                    ),
                    ScriptBeat(
                        timestamp=f"{third * 2}-{total}s",
                        visual="Result reveal",
                        voiceover=data.call_to_action,
                        on_screen_text=data.call_to_action,
                    ),
                ],
                cta=data.call_to_action,
            )
        )
    platforms = data.platforms or ["Instagram"]
    notes = []
    exports = []
    for platform in platforms:
        fmt, tip = PLATFORM_SPECS.get(platform.lower(), ("9:16", "Keep text inside safe zones"))
        notes.append(PlatformNote(platform=platform, format=fmt, tips=tip))
        exports.append(ExportOption(platform=platform, resolution="1080x1920", aspect_ratio="9:16"))
    return ReelsScriptsOutput(
        script_variations=variations,
        platform_specific=notes,
        visual_elements=["Bold captions", "Jump cuts every 2-3 seconds", "Branded end card"],
        audio_guidance=AudioGuidance(
            music_style="Upbeat trending track at low volume",
            voice_tone=f"{data.style.capitalize()} and energetic",
            pacing="Fast",
        ),
        optimization=["Post when your audience is most active", "Pin a comment with the key takeaway"],
        export_options=exports,
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=ReelsScriptsInput,
    output_model=ReelsScriptsOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
