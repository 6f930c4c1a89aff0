"""Personalized cold outreach messages and follow-up sequence."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction

DEFINITION = ToolDefinition(
    id="cold-outreach",
    name="Cold Outreach Personalization",
    description="Researched, personalized outreach across channels",
    category="Outreach",
)

# platform, best timing, follow-up trigger
CHANNEL_PLAYBOOK: dict[str, tuple[str, str]] = {
    "linkedin": ("Tuesday 10 AM or Wednesday 2 PM", "No response after 3 business days"),
    "email": ("Tuesday 9 AM or Thursday 3 PM", "No response after 4 business days"),
    "twitter": ("Monday 11 AM or Friday 1 PM", "No response after 2 business days"),
    "phone": ("Tuesday 10 AM or Wednesday 2 PM", "No response after 1 business day"),
}


class ColdOutreachInput(ToolInput):
    prospect_name: str = Field(
        "there",
        validation_alias=AliasChoices("prospectName", "prospect_name", "name", "recipientName"),
        serialization_alias="prospectName",
    )
    prospect_company: str = Field(
        "their company",
        validation_alias=AliasChoices("prospectCompany", "prospect_company", "company", "companyName"),
        serialization_alias="prospectCompany",
    )
    prospect_role: str = Field(
        "decision maker",
        validation_alias=AliasChoices("prospectRole", "prospect_role", "role", "jobTitle"),
        serialization_alias="prospectRole",
    )
    industry: str = "their industry"
    your_offering: str = Field(
        "our solution",
        validation_alias=AliasChoices("yourOffering", "your_offering", "offering", "product"),
        serialization_alias="yourOffering",
    )
    pain_point: str = Field(
        "growth challenges",
        validation_alias=AliasChoices("painPoint", "pain_point", "challenge"),
        serialization_alias="painPoint",
    )
    channels: StrList = Field(default_factory=lambda: ["LinkedIn", "Email"])


class PersonalizationElements(ToolOutput):
    research_points: list[str]
    common_ground: list[str]
    value_propositions: list[str]


class OutreachMessage(ToolOutput):
    platform: str
    subject_line: str
    content: str
    timing: str
    purpose: str
    follow_up_trigger: str


class PersonalizationTemplate(ToolOutput):
    template_name: str
    hook: str
    personalization: str
    call_to_action: str


class FollowUp(ToolOutput):
    day: int = Field(..., ge=0)
    channel: str
    message: str


class TrackingMetric(ToolOutput):
    metric: str
    target: str


class ColdOutreachOutput(ToolOutput):
    personalization_elements: PersonalizationElements
    outreach_messages: list[OutreachMessage]
    personalization_templates: list[PersonalizationTemplate]
    follow_up_sequence: list[FollowUp]
    best_practices: list[str]
    tracking_metrics: list[TrackingMetric]
    optimization_testing: list[str]


def build(data: ColdOutreachInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "a B2B sales development expert who writes short, personal outreach",
        (
            f"Write outreach to {data.prospect_name}, {data.prospect_role} at {data.prospect_company} "
            f"({data.industry}), about how {data.your_offering} addresses {data.pain_point}."
        ),
        data,
        ColdOutreachOutput,
        guidance=[
            f"Write one message per channel: {', '.join(data.channels)}",
            "Messages stay under 120 words and end with a low-friction question",
            "followUpSequence uses day offsets from the first touch",
        ],
    )


def fallback(data: ColdOutreachInput) -> ColdOutreachOutput:
    channels = data.channels or ["Email"]
    messages = []
    for channel in channels:
        timing, trigger = CHANNEL_PLAYBOOK.get(channel.lower(), ("Tuesday 10 AM", "No response after 3 business days"))
        messages.append(
            OutreachMessage(
                platform=channel,
                subject_line=f"Quick thought on {data.pain_point} at {data.prospect_company}",
                content=(
                    f"Hi {data.prospect_name}, as {data.prospect_role} at {data.prospect_company} you are probably "
                    f"dealing with {data.pain_point}. We help {data.industry} teams with {data.your_offering}. "
                    "Worth a short conversation?"
                ),
                timing=timing,
                purpose="Open a conversation around a shared problem",
                follow_up_trigger=trigger,
            )
        )
    return ColdOutreachOutput(
        personalization_elements=PersonalizationElements(
            research_points=[
                f"Recent news about {data.prospect_company}",
                f"Responsibilities of a {data.prospect_role}",
                f"Current challenges in {data.industry}",
            ],
            common_ground=["Shared industry challenges", "Mutual professional interests"],
            value_propositions=[f"{data.your_offering} reduces {data.pain_point}", "Faster time to results"],
        ),
        outreach_messages=messages,
        personalization_templates=[
            PersonalizationTemplate(
                template_name="Value-First Approach",
                hook="Reference recent company news or achievements",
                personalization="Mention role responsibilities and industry challenges",
                call_to_action="Offer a relevant resource",
            ),
            PersonalizationTemplate(
                template_name="Problem-Solution",
                hook=f"Name the {data.pain_point} problem directly",
                personalization=f"Tie it to {data.prospect_company}'s situation",
                call_to_action="Ask for a 15-minute call",
            ),
        ],
        follow_up_sequence=[
            FollowUp(day=3, channel=channels[0], message="Share a short case study"),
            FollowUp(day=7, channel=channels[-1], message="Ask a single yes/no question"),
            FollowUp(day=14, channel=channels[0], message="Polite close-the-loop note"),
        ],
        best_practices=["Personalize the first line", "Keep messages under 120 words", "One ask per message"],
        tracking_metrics=[
            TrackingMetric(metric="Open rate", target="45%+"),
            TrackingMetric(metric="Reply rate", target="8%+"),
            TrackingMetric(metric="Meetings booked", target="2%+"),
        ],
        optimization_testing=["Test question vs. statement subject lines", "Test sending day and time"],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=ColdOutreachInput,
    output_model=ColdOutreachOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
