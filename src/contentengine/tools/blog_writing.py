"""Long-form blog post writing with SEO metadata."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction

DEFINITION = ToolDefinition(
    id="blog-writing",
    name="Blog Writing & Optimization",
    description="SEO-optimized blog posts with outline and promotion plan",
    category="Content",
)

WORD_COUNTS = {"short": 800, "medium": 1500, "long": 2500}


class BlogWritingInput(ToolInput):
    topic: str = Field(
        "digital marketing",
        validation_alias=AliasChoices("topic", "title", "blogTopic"),
        serialization_alias="topic",
    )
    keywords: StrList = Field(default_factory=list)
    target_audience: str = Field(
        "general readers",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    tone: str = "professional"
    length: str = "medium"


class OutlineSection(ToolOutput):
    heading: str
    key_points: list[str]


class SeoOptimization(ToolOutput):
    primary_keyword: str
    secondary_keywords: list[str]
    keyword_density: str
    readability_score: int = Field(..., ge=0, le=100)
    word_count: int = Field(..., ge=0)


class ContentMarketing(ToolOutput):
    social_snippets: list[str]
    email_subject_lines: list[str]
    internal_link_ideas: list[str]


class BlogWritingOutput(ToolOutput):
    title: str
    meta_description: str
    introduction: str
    outline: list[OutlineSection]
    content: str
    conclusion: str
    seo_optimization: SeoOptimization
    content_marketing: ContentMarketing
    suggestions: list[str]


def _target_words(length: str) -> int:
    lowered = length.lower()
    for key, words in WORD_COUNTS.items():
        if key in lowered:
            return words
    digits = "".join(ch for ch in lowered if ch.isdigit())
    return int(digits) if digits and 100 <= int(digits) <= 10000 else WORD_COUNTS["medium"]


def build(data: BlogWritingInput) -> GenerationInstruction:
    words = _target_words(data.length)
    return make_instruction(
        DEFINITION.id,
        "a senior content writer and SEO editor",
        f"Write a complete blog post about '{data.topic}' for {data.target_audience} in a {data.tone} tone.",
        data,
        BlogWritingOutput,
        guidance=[
            f"The content field holds the full article of roughly {words} words in Markdown",
            "metaDescription is 150-160 characters",
            "Use the supplied keywords naturally; the first one is the primary keyword",
            "outline mirrors the H2 sections of the content",
        ],
    )


def fallback(data: BlogWritingInput) -> BlogWritingOutput:
    topic = data.topic
    primary = data.keywords[0] if data.keywords else topic
    secondary = data.keywords[1:] or [f"{topic} tips", f"{topic} strategy"]
    headings = [
        f"What {topic} means for {data.target_audience}",
        f"Common {topic} mistakes to avoid",
        f"A step-by-step {topic} plan",
        f"Measuring {topic} results",
    ]
    outline = [
        OutlineSection(
            heading=heading,
            key_points=[f"Key idea {n} about {primary}" for n in (1, 2, 3)],
        )
        for heading in headings
    ]
    introduction = (
        f"{topic.capitalize()} keeps changing, and {data.target_audience} need a clear way to keep up. "
        f"This guide covers the essentials of {primary} and a practical plan you can start this week."
    )
    body = "\n\n".join(
        f"## {section.heading}\n\n" + " ".join(f"{point}." for point in section.key_points) for section in outline
    )
    conclusion = f"Start small, track results, and refine your {topic} approach every month."
    content = f"{introduction}\n\n{body}\n\n## Conclusion\n\n{conclusion}"
    return BlogWritingOutput(
        title=f"The Practical Guide to {topic.title()} for {data.target_audience.title()}",
        meta_description=f"Learn {topic} strategies for {data.target_audience}: common mistakes, a step-by-step plan and how to measure results."[:160],
        introduction=introduction,
        outline=outline,
        content=content,
        conclusion=conclusion,
        seo_optimization=SeoOptimization(
            primary_keyword=primary,
            secondary_keywords=secondary,
            keyword_density="1-2%",
            readability_score=65,
            word_count=len(content.split()),
        ),
        content_marketing=ContentMarketing(
            social_snippets=[f"New post: {headings[2]}", f"Are you making these {topic} mistakes?"],
            email_subject_lines=[f"Your {topic} plan for this month", f"{primary}: what actually works"],
            internal_link_ideas=[f"Link to related {topic} case studies", "Link to your services page"],
        ),
        suggestions=[
            "Add an original image or chart for each section",
            "Include a downloadable checklist to capture leads",
            f"Update the post quarterly as {topic} practices change",
        ],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=BlogWritingInput,
    output_model=BlogWritingOutput,
    builder=build,
    fallback=fallback,
    # Never mix model and synthetic sections in one article
    missing_section_policy=MissingSectionPolicy.DISCARD,
)
