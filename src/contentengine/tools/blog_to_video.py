"""Turns a blog post into video scripts and a production plan."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction

DEFINITION = ToolDefinition(
    id="blog-to-video",
    name="Blog-to-Video Agent",
    description="Video scripts, storyboard and distribution plan from a blog post",
    category="Video",
)

EXCERPT_CHARS = 400


class BlogToVideoInput(ToolInput):
    blog_title: str = Field(
        "Untitled post",
        validation_alias=AliasChoices("blogTitle", "blog_title", "title"),
        serialization_alias="blogTitle",
    )
    blog_content: str = Field(
        "",
        validation_alias=AliasChoices("blogContent", "blog_content", "content", "blogUrl", "url"),
        serialization_alias="blogContent",
    )
    video_length: str = Field(
        "60 seconds",
        validation_alias=AliasChoices("videoLength", "video_length", "duration"),
        serialization_alias="videoLength",
    )
    platforms: StrList = Field(default_factory=lambda: ["YouTube", "Instagram", "TikTok"])
    style: str = "educational"


class VideoScript(ToolOutput):
    platform: str
    duration: str
    hook: str
    script: str
    cta: str


class StoryboardFrame(ToolOutput):
    scene: int = Field(..., ge=1)
    visual: str
    narration: str
    duration: str


class Production(ToolOutput):
    equipment: list[str]
    editing_notes: list[str]
    estimated_time: str


class VideoOptimization(ToolOutput):
    titles: list[str]
    tags: list[str]
    description: str


class VideoAnalytics(ToolOutput):
    kpis: list[str]
    benchmarks: list[str]


class PlatformPlan(ToolOutput):
    platform: str
    format: str
    posting_tip: str


class BlogToVideoOutput(ToolOutput):
    scripts: list[VideoScript]
    storyboard: list[StoryboardFrame]
    production: Production
    optimization: VideoOptimization
    analytics: VideoAnalytics
    platform_strategy: list[PlatformPlan]
    thumbnail_concept: str


PLATFORM_FORMATS = {"youtube": "16:9 long-form or 9:16 Short", "instagram": "9:16 Reel", "tiktok": "9:16 vertical"}


def _key_sentences(content: str, limit: int = 3) -> list[str]:
    sentences = [s.strip() for s in content.replace("\n", " ").split(".") if len(s.strip()) > 20]
    return sentences[:limit]


def build(data: BlogToVideoInput) -> GenerationInstruction:
    excerpt = data.blog_content[:EXCERPT_CHARS]
    return make_instruction(
        DEFINITION.id,
        "a video producer who repurposes written content",
        f"Turn the blog post '{data.blog_title}' into {data.video_length} {data.style} videos.",
        data.model_copy(update={"blog_content": excerpt}),
        BlogToVideoOutput,
        guidance=[
            f"Write one script per platform: {', '.join(data.platforms)}",
            "storyboard scenes are numbered from 1",
            "Pull the key points from the blog content; do not invent statistics",
        ],
    )


def fallback(data: BlogToVideoInput) -> BlogToVideoOutput:
    points = _key_sentences(data.blog_content) or [
        f"The main idea of {data.blog_title}",
        "Why it matters",
        "What to do next",
    ]
    platforms = data.platforms or ["YouTube"]
    hook = f"Here is {data.blog_title} in {data.video_length}."
    script = " ".join(f"{p}." if not p.endswith(".") else p for p in points)
    return BlogToVideoOutput(
        scripts=[
            VideoScript(platform=p, duration=data.video_length, hook=hook, script=script, cta="Read the full post")
            for p in platforms
        ],
        storyboard=[
            StoryboardFrame(scene=i + 1, visual=f"B-roll illustrating point {i + 1}", narration=point, duration="10s")
            for i, point in enumerate(points)
        ],
        production=Production(
            equipment=["Smartphone or DSLR", "Lavalier mic", "Soft light"],
            editing_notes=["Add captions", "Cut pauses", "Brand intro under 2 seconds"],
            estimated_time="3-4 hours",
        ),
        optimization=VideoOptimization(
            titles=[data.blog_title, f"{data.blog_title} (explained fast)"],
            tags=[w.lower() for w in data.blog_title.split() if len(w) > 3][:5] or ["video"],
            description=f"A {data.style} video version of '{data.blog_title}'.",
        ),
        analytics=VideoAnalytics(
            kpis=["Views", "Average watch time", "Click-through to blog"],
            benchmarks=["50%+ retention at 15s", "2%+ click-through"],
        ),
        platform_strategy=[
            PlatformPlan(
                platform=p,
                format=PLATFORM_FORMATS.get(p.lower(), "9:16 vertical"),
                posting_tip="Post within 24 hours of the blog going live",
            )
            for p in platforms
        ],
        thumbnail_concept=f"Bold text '{data.blog_title[:30]}' over a close-up face with a contrasting background",
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=BlogToVideoInput,
    output_model=BlogToVideoOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
