"""Social media content calendar generator."""

import re
from enum import Enum

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, classify, make_instruction

DEFINITION = ToolDefinition(
    id="social-media",
    name="Social Media Content Generator",
    description="Platform-specific posts, content mix and posting schedule",
    category="Content",
    included_in_trial=True,
)

DEFAULT_PLATFORMS = ["LinkedIn", "Instagram", "Twitter", "Facebook"]


class SocialMediaInput(ToolInput):
    business_name: str = Field(
        "Your Business",
        validation_alias=AliasChoices("businessName", "business_name", "brandName", "company"),
        serialization_alias="businessName",
    )
    industry: str = "general business"
    target_audience: str = Field(
        "general audience",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    platforms: StrList = Field(default_factory=lambda: list(DEFAULT_PLATFORMS))
    content_goals: str = "brand awareness"
    brand_voice: str = "professional"
    post_frequency: str = "3 times per week"


class ContentMix(ToolOutput):
    educational: int = Field(..., ge=0, le=100)
    engaging: int = Field(..., ge=0, le=100)
    promotional: int = Field(..., ge=0, le=100)
    ugc: int = Field(..., ge=0, le=100)


class SocialPost(ToolOutput):
    platform: str
    content_type: str
    content: str
    hashtags: list[str]
    best_time: str
    engagement_tip: str


class ScheduleSlot(ToolOutput):
    day: str
    times: list[str]
    content_type: str


class HashtagStrategy(ToolOutput):
    trending: list[str]
    niche: list[str]
    branded: list[str]


class SocialMediaOutput(ToolOutput):
    posts: list[SocialPost]
    content_mix: ContentMix
    posting_schedule: list[ScheduleSlot]
    hashtag_strategy: HashtagStrategy
    engagement_tips: list[str]


class ContentGoal(str, Enum):
    LEADS = "leads"
    AWARENESS = "awareness"
    ENGAGEMENT = "engagement"
    SALES = "sales"
    GENERAL = "general"


class BrandVoice(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    OTHER = "other"


class PostingCadence(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    OTHER = "other"


GOAL_KEYWORDS = {
    ContentGoal.LEADS: ("lead",),
    ContentGoal.AWARENESS: ("awareness",),
    ContentGoal.ENGAGEMENT: ("engagement",),
    ContentGoal.SALES: ("sales",),
}
VOICE_KEYWORDS = {
    BrandVoice.PROFESSIONAL: ("professional",),
    BrandVoice.CASUAL: ("casual", "fun"),
}
CADENCE_KEYWORDS = {
    PostingCadence.DAILY: ("daily", "5"),
    PostingCadence.WEEKLY: ("weekly", "2"),
}

# educational, engaging, promotional, ugc
GOAL_MIX: dict[ContentGoal, tuple[int, int, int, int]] = {
    ContentGoal.LEADS: (25, 25, 35, 15),
    ContentGoal.AWARENESS: (45, 30, 15, 10),
    ContentGoal.ENGAGEMENT: (25, 40, 20, 15),
    ContentGoal.SALES: (20, 25, 40, 15),
    ContentGoal.GENERAL: (40, 30, 20, 10),
}

BEST_TIMES: dict[str, str] = {
    "linkedin": "Tuesday-Thursday, 8-10 AM",
    "instagram": "Monday-Friday, 11 AM-1 PM",
    "twitter": "Weekdays, 9 AM and 3 PM",
    "facebook": "Wednesday-Friday, 1-3 PM",
    "tiktok": "Tuesday-Thursday, 6-9 PM",
    "youtube": "Thursday-Saturday, 2-4 PM",
}

POST_TEMPLATES: dict[str, str] = {
    "educational": "3 things every {audience} should know about {industry} this month. Save this for later.",
    "engaging": "Quick poll for {audience}: what is your biggest {industry} challenge right now? Tell us below.",
    "promotional": "{business} helps {audience} get more out of {industry}. See what is new this week.",
    "ugc": "We love seeing how our community uses {business}. Share yours and tag us for a feature.",
}


def content_mix(goals: str, voice: str, frequency: str) -> ContentMix:
    """
    Derive the content-type mix from goals, brand voice and posting frequency.

    Percentages always sum to 100.
    """
    goal = classify(goals, GOAL_KEYWORDS, ContentGoal.GENERAL)
    educational, engaging, promotional, ugc = GOAL_MIX[goal]

    tone = classify(voice, VOICE_KEYWORDS, BrandVoice.OTHER)
    if tone is BrandVoice.PROFESSIONAL:
        educational = min(educational + 10, 50)
        promotional = max(promotional - 5, 15)
    elif tone is BrandVoice.CASUAL:
        engaging = min(engaging + 10, 45)
        educational = max(educational - 5, 20)

    cadence = classify(frequency, CADENCE_KEYWORDS, PostingCadence.OTHER)
    if cadence is PostingCadence.DAILY:
        ugc = min(ugc + 5, 20)
        promotional = max(promotional - 5, 15)
    elif cadence is PostingCadence.WEEKLY:
        promotional = min(promotional + 5, 25)
        educational = min(educational + 5, 45)

    total = educational + engaging + promotional + ugc
    if total != 100:
        factor = 100 / total
        educational = round(educational * factor)
        engaging = round(engaging * factor)
        promotional = round(promotional * factor)
        ugc = 100 - educational - engaging - promotional

    return ContentMix(educational=educational, engaging=engaging, promotional=promotional, ugc=ugc)


def posting_schedule(frequency: str, mix: ContentMix) -> list[ScheduleSlot]:
    """Weekday slots for daily cadence, Monday/Wednesday/Friday otherwise."""
    cadence = classify(frequency, CADENCE_KEYWORDS, PostingCadence.OTHER)
    if cadence is PostingCadence.DAILY:
        days = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    else:
        days = ["Monday", "Wednesday", "Friday"]

    ranked = sorted(mix.model_dump().items(), key=lambda item: item[1], reverse=True)
    rotation = [name for name, share in ranked if share > 0]
    return [
        ScheduleSlot(day=day, times=["9:00 AM", "1:00 PM"], content_type=rotation[i % len(rotation)])
        for i, day in enumerate(days)
    ]


def _tag(text: str) -> str:
    return "#" + re.sub(r"[^0-9a-zA-Z]", "", text.title())


def build(data: SocialMediaInput) -> GenerationInstruction:
    mix = content_mix(data.content_goals, data.brand_voice, data.post_frequency)
    return make_instruction(
        DEFINITION.id,
        "a social media strategist who writes platform-native posts",
        (
            f"Create a social media content plan for {data.business_name} in {data.industry}, "
            f"aimed at {data.target_audience}, on {', '.join(data.platforms)}."
        ),
        data,
        SocialMediaOutput,
        guidance=[
            f"Write at least one post per platform in a {data.brand_voice} voice",
            (
                f"Target a content mix close to educational {mix.educational}%, engaging {mix.engaging}%, "
                f"promotional {mix.promotional}%, ugc {mix.ugc}%; contentMix values must sum to 100"
            ),
            f"Build the postingSchedule for a cadence of {data.post_frequency}",
            "hashtagStrategy lists trending, niche and branded hashtags",
        ],
    )


def fallback(data: SocialMediaInput) -> SocialMediaOutput:
    mix = content_mix(data.content_goals, data.brand_voice, data.post_frequency)
    platforms = data.platforms or list(DEFAULT_PLATFORMS)
    ranked_types = [name for name, _ in sorted(mix.model_dump().items(), key=lambda item: item[1], reverse=True)]
    industry_tag = _tag(data.industry)
    brand_tag = _tag(data.business_name)

    posts = []
    for i, platform in enumerate(platforms):
        content_type = ranked_types[i % len(ranked_types)]
        text = POST_TEMPLATES[content_type].format(
            audience=data.target_audience, industry=data.industry, business=data.business_name
        )
        posts.append(
            SocialPost(
                platform=platform,
                content_type=content_type,
                content=text,
                hashtags=[industry_tag, brand_tag, "#" + content_type.title()],
                best_time=BEST_TIMES.get(platform.lower(), "Weekdays, 10 AM-2 PM"),
                engagement_tip=f"Reply to every comment on {platform} within the first hour",
            )
        )

    return SocialMediaOutput(
        posts=posts,
        content_mix=mix,
        posting_schedule=posting_schedule(data.post_frequency, mix),
        hashtag_strategy=HashtagStrategy(
            trending=["#MarketingTips", "#SmallBusiness", "#Growth"],
            niche=[industry_tag, _tag(f"{data.industry} tips"), _tag(data.target_audience)],
            branded=[brand_tag, _tag(f"{data.business_name} community")],
        ),
        engagement_tips=[
            "Ask a question at the end of educational posts",
            "Reshare customer content with permission",
            f"Keep the {data.brand_voice} voice consistent across platforms",
        ],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=SocialMediaInput,
    output_model=SocialMediaOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
