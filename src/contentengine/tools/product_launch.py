"""Product launch plan with phased timeline and launch assets."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction

DEFINITION = ToolDefinition(
    id="product-launch",
    name="Product Launch Agent",
    description="Phased launch plan, emails, posts and press release",
    category="Launch",
)


class ProductLaunchInput(ToolInput):
    product_name: str = Field(
        "New Product",
        validation_alias=AliasChoices("productName", "product_name", "product"),
        serialization_alias="productName",
    )
    product_description: str = Field(
        "a new product",
        validation_alias=AliasChoices("productDescription", "product_description", "description"),
        serialization_alias="productDescription",
    )
    target_audience: str = Field(
        "early adopters",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    launch_date: str = "in 8 weeks"
    budget: str = "moderate"
    channels: StrList = Field(default_factory=lambda: ["Email", "Social Media", "PR"])


class LaunchPhase(ToolOutput):
    phase: str
    timeline: str
    activities: list[str]
    deliverables: list[str]
    kpis: list[str]


class LaunchEmail(ToolOutput):
    name: str
    subject: str
    send_timing: str
    content: str


class LaunchPost(ToolOutput):
    platform: str
    content: str
    timing: str


class PressRelease(ToolOutput):
    headline: str
    subheadline: str
    body: str
    boilerplate: str


class CalendarEntry(ToolOutput):
    week: str
    focus: str
    content: list[str]


class LaunchAnalytics(ToolOutput):
    kpis: list[str]
    tracking_tools: list[str]
    success_criteria: str


class ProductLaunchOutput(ToolOutput):
    timeline: list[LaunchPhase]
    email_campaigns: list[LaunchEmail]
    social_media_posts: list[LaunchPost]
    press_release: PressRelease
    content_calendar: list[CalendarEntry]
    analytics: LaunchAnalytics


# phase, timeline, activities, kpis
PHASES: list[tuple[str, str, list[str], list[str]]] = [
    (
        "Pre-Launch (8 weeks before)",
        "Week -8 to -6",
        ["Finalize positioning and messaging", "Build landing page and capture leads", "Plan PR and media outreach"],
        ["Email signups", "Website traffic"],
    ),
    (
        "Soft Launch (4 weeks before)",
        "Week -4 to -2",
        ["Beta test with select customers", "Gather testimonials", "Build anticipation with teasers"],
        ["Beta satisfaction", "Waitlist growth"],
    ),
    (
        "Launch Week",
        "Week 0",
        ["Send launch emails", "Publish across all channels", "Activate PR outreach"],
        ["Launch day signups", "Media coverage", "Sales conversions"],
    ),
    (
        "Post-Launch (4 weeks after)",
        "Week +1 to +4",
        ["Analyze launch performance", "Optimize onboarding", "Plan follow-up campaigns"],
        ["Retention", "Customer acquisition cost"],
    ),
]


def build(data: ProductLaunchInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "a product marketing manager who has run many launches",
        (
            f"Plan the launch of {data.product_name} ({data.product_description}) for {data.target_audience}, "
            f"launching {data.launch_date} with a {data.budget} budget."
        ),
        data,
        ProductLaunchOutput,
        guidance=[
            "timeline covers pre-launch, soft launch, launch week and post-launch phases",
            f"Use these channels: {', '.join(data.channels)}",
            "pressRelease follows standard press release structure",
        ],
    )


def fallback(data: ProductLaunchInput) -> ProductLaunchOutput:
    name = data.product_name
    timeline = [
        LaunchPhase(
            phase=phase,
            timeline=window,
            activities=activities,
            deliverables=[f"{name} {item}" for item in ("brief", "assets", "report")],
            kpis=kpis,
        )
        for phase, window, activities, kpis in PHASES
    ]
    return ProductLaunchOutput(
        timeline=timeline,
        email_campaigns=[
            LaunchEmail(
                name="Teaser",
                subject=f"Something new is coming for {data.target_audience}",
                send_timing="2 weeks before launch",
                content=f"We have been building {data.product_description}. Be first in line.",
            ),
            LaunchEmail(
                name="Launch announcement",
                subject=f"{name} is here",
                send_timing="Launch day",
                content=f"{name} is live. Here is what it does for {data.target_audience}.",
            ),
            LaunchEmail(
                name="Follow-up",
                subject=f"How teams are using {name}",
                send_timing="1 week after launch",
                content="Early customer stories and tips to get started.",
            ),
        ],
        social_media_posts=[
            LaunchPost(platform=channel, content=f"Meet {name}: {data.product_description}.", timing="Launch day")
            for channel in (data.channels or ["Social Media"])
        ],
        press_release=PressRelease(
            headline=f"{name} Launches to Help {data.target_audience.title()}",
            subheadline=data.product_description.capitalize(),
            body=f"Today marks the launch of {name}, {data.product_description}, built for {data.target_audience}.",
            boilerplate=f"About {name}: contact the press team for media inquiries.",
        ),
        content_calendar=[
            CalendarEntry(week="Week -2", focus="Teasers", content=["Sneak peek post", "Waitlist email"]),
            CalendarEntry(week="Week 0", focus="Launch", content=["Announcement post", "Press release", "Launch email"]),
            CalendarEntry(week="Week +2", focus="Proof", content=["Customer story", "Tutorial video"]),
        ],
        analytics=LaunchAnalytics(
            kpis=["Signups", "Activation rate", "Media mentions"],
            tracking_tools=["Web analytics", "Email platform reports", "UTM-tagged links"],
            success_criteria=f"Hit signup target within 30 days of launching {name}",
        ),
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=ProductLaunchInput,
    output_model=ProductLaunchOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
