"""Email campaign and sequence generator with benchmark predictions."""

from enum import Enum

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import ToolInput, ToolOutput, ToolSpec, classify, make_instruction

DEFINITION = ToolDefinition(
    id="email-marketing",
    name="Email Marketing Agent",
    description="Campaign copy, sequences and open/click predictions",
    category="Email",
)


class EmailMarketingInput(ToolInput):
    business_name: str = Field(
        "Your Business",
        validation_alias=AliasChoices("businessName", "business_name", "company"),
        serialization_alias="businessName",
    )
    campaign_type: str = "newsletter"
    target_audience: str = Field(
        "customers",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    subject: str = Field(
        "",
        validation_alias=AliasChoices("subject", "subjectLine", "subject_line"),
        serialization_alias="subject",
    )
    goals: str = "increase engagement"
    product_or_service: str = "our offering"


class EmailCampaign(ToolOutput):
    subject_line: str
    preview_text: str
    body: str
    cta: str
    send_time: str


class SequenceEmail(ToolOutput):
    day: int = Field(..., ge=0)
    subject: str
    purpose: str
    content: str


class CampaignAnalytics(ToolOutput):
    expected_open_rate: float = Field(..., ge=0, le=1)
    expected_click_rate: float = Field(..., ge=0, le=1)
    expected_conversion_rate: float = Field(..., ge=0, le=1)
    best_send_times: list[str]


class Optimization(ToolOutput):
    subject_line_variations: list[str]
    ab_test_ideas: list[str]
    segmentation_tips: list[str]


class EmailMarketingOutput(ToolOutput):
    campaigns: list[EmailCampaign]
    sequence: list[SequenceEmail]
    analytics: CampaignAnalytics
    optimization: Optimization


class AudienceSegment(str, Enum):
    BUSINESS_OWNERS = "business owners"
    MARKETERS = "marketers"
    ENTREPRENEURS = "entrepreneurs"
    PROFESSIONALS = "professionals"
    STUDENTS = "students"
    GENERAL = "general"


class CampaignType(str, Enum):
    WELCOME = "welcome"
    NURTURE = "nurture"
    PROMOTIONAL = "promotional"
    NEWSLETTER = "newsletter"
    RE_ENGAGEMENT = "re-engagement"


AUDIENCE_KEYWORDS = {
    AudienceSegment.BUSINESS_OWNERS: ("business owner", "owners", "smb"),
    AudienceSegment.MARKETERS: ("marketer", "marketing"),
    AudienceSegment.ENTREPRENEURS: ("entrepreneur", "founder", "startup"),
    AudienceSegment.PROFESSIONALS: ("professional", "executive", "manager"),
    AudienceSegment.STUDENTS: ("student", "learner"),
}
CAMPAIGN_KEYWORDS = {
    CampaignType.RE_ENGAGEMENT: ("re-engage", "reengage", "win-back", "winback", "re-engagement"),
    CampaignType.WELCOME: ("welcome", "onboard"),
    CampaignType.NURTURE: ("nurture", "drip"),
    CampaignType.PROMOTIONAL: ("promo", "sale", "discount", "offer"),
    CampaignType.NEWSLETTER: ("newsletter", "update", "digest"),
}

# open, click, conversion
AUDIENCE_BENCHMARKS: dict[AudienceSegment, tuple[float, float, float]] = {
    AudienceSegment.BUSINESS_OWNERS: (0.28, 0.042, 0.015),
    AudienceSegment.MARKETERS: (0.32, 0.048, 0.018),
    AudienceSegment.ENTREPRENEURS: (0.26, 0.038, 0.012),
    AudienceSegment.PROFESSIONALS: (0.30, 0.045, 0.016),
    AudienceSegment.STUDENTS: (0.35, 0.052, 0.020),
    AudienceSegment.GENERAL: (0.25, 0.035, 0.012),
}
CAMPAIGN_MULTIPLIERS: dict[CampaignType, tuple[float, float, float]] = {
    CampaignType.WELCOME: (1.2, 1.3, 1.4),
    CampaignType.NURTURE: (1.1, 1.2, 1.3),
    CampaignType.PROMOTIONAL: (0.9, 1.1, 1.2),
    CampaignType.NEWSLETTER: (1.0, 1.0, 1.0),
    CampaignType.RE_ENGAGEMENT: (0.8, 0.9, 1.0),
}
BEST_SEND_TIMES: dict[AudienceSegment, list[str]] = {
    AudienceSegment.BUSINESS_OWNERS: ["Tuesday 10:00 AM", "Thursday 2:00 PM"],
    AudienceSegment.MARKETERS: ["Tuesday 9:00 AM", "Wednesday 11:00 AM"],
    AudienceSegment.ENTREPRENEURS: ["Monday 8:00 AM", "Thursday 7:00 PM"],
    AudienceSegment.PROFESSIONALS: ["Tuesday 8:00 AM", "Thursday 12:00 PM"],
    AudienceSegment.STUDENTS: ["Sunday 6:00 PM", "Wednesday 8:00 PM"],
    AudienceSegment.GENERAL: ["Tuesday 10:00 AM", "Thursday 10:00 AM"],
}
SEQUENCE_PLANS: dict[CampaignType, list[tuple[int, str]]] = {
    CampaignType.WELCOME: [(0, "Welcome and set expectations"), (2, "Share your best resource"), (5, "Introduce the core offer")],
    CampaignType.NURTURE: [(0, "Educate on the core problem"), (3, "Show a customer story"), (7, "Invite a low-risk next step")],
    CampaignType.PROMOTIONAL: [(0, "Announce the offer"), (2, "Answer objections"), (4, "Last chance reminder")],
    CampaignType.NEWSLETTER: [(0, "Monthly highlights"), (30, "Next monthly highlights")],
    CampaignType.RE_ENGAGEMENT: [(0, "We miss you"), (4, "What is new since your last visit"), (9, "Stay or unsubscribe")],
}


def predicted_rates(audience: str, campaign_type: str) -> tuple[float, float, float]:
    """Open, click and conversion predictions for an audience and campaign type."""
    segment = classify(audience, AUDIENCE_KEYWORDS, AudienceSegment.GENERAL)
    kind = classify(campaign_type, CAMPAIGN_KEYWORDS, CampaignType.NEWSLETTER)
    base = AUDIENCE_BENCHMARKS[segment]
    multipliers = CAMPAIGN_MULTIPLIERS[kind]
    return tuple(min(round(b * m, 4), 1.0) for b, m in zip(base, multipliers))  # type: ignore[return-value]


def build(data: EmailMarketingInput) -> GenerationInstruction:
    opens, clicks, conversions = predicted_rates(data.target_audience, data.campaign_type)
    subject_hint = f"Start from the subject line '{data.subject}'" if data.subject else "Propose fresh subject lines"
    return make_instruction(
        DEFINITION.id,
        "an email marketing specialist focused on deliverability and conversions",
        (
            f"Create a {data.campaign_type} email campaign for {data.business_name} promoting "
            f"{data.product_or_service} to {data.target_audience}. Goal: {data.goals}."
        ),
        data,
        EmailMarketingOutput,
        guidance=[
            subject_hint,
            "sequence lists follow-up emails with their send day offset",
            (
                f"Industry benchmarks for this audience: open {opens:.1%}, click {clicks:.1%}, "
                f"conversion {conversions:.1%}; analytics rates are fractions between 0 and 1"
            ),
        ],
    )


def fallback(data: EmailMarketingInput) -> EmailMarketingOutput:
    segment = classify(data.target_audience, AUDIENCE_KEYWORDS, AudienceSegment.GENERAL)
    kind = classify(data.campaign_type, CAMPAIGN_KEYWORDS, CampaignType.NEWSLETTER)
    opens, clicks, conversions = predicted_rates(data.target_audience, data.campaign_type)
    send_times = BEST_SEND_TIMES[segment]
    subject = data.subject or f"{data.business_name}: {data.goals.capitalize()}"

    campaigns = [
        EmailCampaign(
            subject_line=subject,
            preview_text=f"How {data.product_or_service} helps {data.target_audience}",
            body=(
                f"Hi there,\n\nAt {data.business_name} we built {data.product_or_service} for "
                f"{data.target_audience} who want to {data.goals}. Here is what that looks like in practice."
            ),
            cta="Learn more",
            send_time=send_times[0],
        )
    ]
    sequence = [
        SequenceEmail(
            day=day,
            subject=f"{purpose} | {data.business_name}",
            purpose=purpose,
            content=f"{purpose} for {data.target_audience}, tied back to {data.product_or_service}.",
        )
        for day, purpose in SEQUENCE_PLANS[kind]
    ]
    return EmailMarketingOutput(
        campaigns=campaigns,
        sequence=sequence,
        analytics=CampaignAnalytics(
            expected_open_rate=opens,
            expected_click_rate=clicks,
            expected_conversion_rate=conversions,
            best_send_times=send_times,
        ),
        optimization=Optimization(
            subject_line_variations=[
                subject,
                f"Quick question about {data.goals}",
                f"{data.target_audience.title()}: this is for you",
            ],
            ab_test_ideas=["Test sender name: brand vs. person", "Test CTA button vs. text link"],
            segmentation_tips=[
                "Segment by engagement in the last 90 days",
                f"Split {data.target_audience} by purchase history",
            ],
        ),
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=EmailMarketingInput,
    output_model=EmailMarketingOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
