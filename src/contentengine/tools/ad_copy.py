"""Multi-platform ad copy generator."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction

DEFINITION = ToolDefinition(
    id="ad-copy",
    name="Ad Copy Generator",
    description="Platform-formatted ad variations with test plans",
    category="Advertising",
)

DEFAULT_PLATFORMS = ["google", "facebook", "instagram"]

PLATFORM_FORMATS: dict[str, list[str]] = {
    "google": ["Search", "Display", "Shopping"],
    "facebook": ["Feed", "Stories", "Carousel"],
    "instagram": ["Feed", "Stories", "Reels"],
    "linkedin": ["Sponsored Content", "Message Ads", "Text Ads"],
    "twitter": ["Promoted Tweets", "Promoted Accounts"],
    "youtube": ["Video", "Display", "Overlay"],
}

# headline, description character limits
SEARCH_LIMITS = (30, 90)
DEFAULT_LIMITS = (40, 125)


class AdCopyInput(ToolInput):
    product: str = Field(
        "your product",
        validation_alias=AliasChoices("product", "productName", "product_name", "productService"),
        serialization_alias="product",
    )
    target_audience: str = Field(
        "potential customers",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    platforms: StrList = Field(default_factory=lambda: list(DEFAULT_PLATFORMS))
    campaign_objective: str = Field(
        "conversions",
        validation_alias=AliasChoices("campaignObjective", "campaign_objective", "objective", "goal"),
        serialization_alias="campaignObjective",
    )
    unique_selling_points: str = Field(
        "quality and value",
        validation_alias=AliasChoices("uniqueSellingPoints", "unique_selling_points", "usp", "benefits"),
        serialization_alias="uniqueSellingPoints",
    )
    keywords: StrList = Field(default_factory=list)


class CharacterCount(ToolOutput):
    headline: int = Field(..., ge=0)
    description: int = Field(..., ge=0)
    headline_limit: int = Field(..., ge=0)
    description_limit: int = Field(..., ge=0)


class AdVariation(ToolOutput):
    platform: str
    format: str
    headline: str
    description: str
    cta: str
    character_count: CharacterCount
    compliance_check: str


class PerformancePrediction(ToolOutput):
    platform: str
    expected_ctr: str
    expected_cpc: str
    confidence: str


class AbTest(ToolOutput):
    element: str
    variant_a: str
    variant_b: str
    hypothesis: str


class KeywordIntegration(ToolOutput):
    primary_keywords: list[str]
    negative_keywords: list[str]
    placement: str


class AdCopyOutput(ToolOutput):
    ad_variations: list[AdVariation]
    performance_predictions: list[PerformancePrediction]
    optimization_tips: list[str]
    ab_test_suggestions: list[AbTest]
    keyword_integration: KeywordIntegration


def limits_for(ad_format: str) -> tuple[int, int]:
    return SEARCH_LIMITS if ad_format == "Search" else DEFAULT_LIMITS


def _fit(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def build(data: AdCopyInput) -> GenerationInstruction:
    formats = [
        f"{p}: {', '.join(PLATFORM_FORMATS.get(p.lower(), ['Feed']))}" for p in data.platforms
    ]
    return make_instruction(
        DEFINITION.id,
        "a performance marketing copywriter",
        (
            f"Write ad copy for {data.product} targeting {data.target_audience}. "
            f"Objective: {data.campaign_objective}. Selling points: {data.unique_selling_points}."
        ),
        data,
        AdCopyOutput,
        guidance=[
            "Produce at least one variation per platform format: " + "; ".join(formats),
            "Search ads: headline up to 30 characters, description up to 90; others: 40 and 125",
            "characterCount reports the real lengths and the limits used",
            "complianceCheck notes any platform policy risk, or 'Passed'",
        ],
    )


def fallback(data: AdCopyInput) -> AdCopyOutput:
    platforms = [p.lower() for p in data.platforms] or list(DEFAULT_PLATFORMS)
    variations = []
    for platform in platforms:
        for ad_format in PLATFORM_FORMATS.get(platform, ["Feed"]):
            headline_limit, description_limit = limits_for(ad_format)
            headline = _fit(f"{data.product.title()} for {data.target_audience.title()}", headline_limit)
            description = _fit(
                f"Get {data.unique_selling_points} with {data.product}. Built for {data.target_audience}.",
                description_limit,
            )
            variations.append(
                AdVariation(
                    platform=platform,
                    format=ad_format,
                    headline=headline,
                    description=description,
                    cta="Shop Now" if "sale" in data.campaign_objective.lower() else "Learn More",
                    character_count=CharacterCount(
                        headline=len(headline),
                        description=len(description),
                        headline_limit=headline_limit,
                        description_limit=description_limit,
                    ),
                    compliance_check="Passed",
                )
            )
    keywords = data.keywords or [data.product, f"best {data.product}"]
    return AdCopyOutput(
        ad_variations=variations,
        performance_predictions=[
            PerformancePrediction(
                platform=platform,
                expected_ctr="3.2%" if platform == "google" else "1.1%",
                expected_cpc="$1.80" if platform == "google" else "$0.95",
                confidence="medium",
            )
            for platform in platforms
        ],
        optimization_tips=[
            "Put the primary keyword in the first headline",
            "Refresh creatives every two to three weeks",
            f"Align landing page copy with the {data.campaign_objective} objective",
        ],
        ab_test_suggestions=[
            AbTest(
                element="Headline",
                variant_a=f"Benefit-led: {data.unique_selling_points}",
                variant_b=f"Audience-led: for {data.target_audience}",
                hypothesis="Benefit-led headlines raise CTR",
            ),
            AbTest(
                element="CTA",
                variant_a="Learn More",
                variant_b="Get Started",
                hypothesis="Action-oriented CTAs raise conversion rate",
            ),
        ],
        keyword_integration=KeywordIntegration(
            primary_keywords=keywords,
            negative_keywords=["free", "jobs", "diy"],
            placement="Headline 1 and the first sentence of the description",
        ),
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=AdCopyInput,
    output_model=AdCopyOutput,
    builder=build,
    fallback=fallback,
    # Character counts must describe the variations they ship with
    missing_section_policy=MissingSectionPolicy.DISCARD,
)
