"""Client performance report generator."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction, stable_variation

DEFINITION = ToolDefinition(
    id="client-reporting",
    name="Client Reporting Agent",
    description="Executive summaries and campaign performance reports",
    category="Analytics",
)


class ClientReportingInput(ToolInput):
    client_name: str = Field(
        "Client",
        validation_alias=AliasChoices("clientName", "client_name", "client"),
        serialization_alias="clientName",
    )
    reporting_period: str = Field(
        "last 30 days",
        validation_alias=AliasChoices("reportingPeriod", "reporting_period", "period", "dateRange"),
        serialization_alias="reportingPeriod",
    )
    channels: StrList = Field(default_factory=lambda: ["SEO", "Paid Search", "Social Media", "Email"])
    goals: str = "grow qualified leads"
    industry: str = "general business"


class Metric(ToolOutput):
    name: str
    value: str
    change: str
    trend: str = Field(..., description="up, down or flat")


class ExecutiveSummary(ToolOutput):
    overview: str
    key_wins: list[str]
    areas_for_improvement: list[str]


class CampaignResult(ToolOutput):
    channel: str
    spend: str
    results: str
    roi: str
    notes: str


class CompetitiveSnapshot(ToolOutput):
    market_position: str
    competitor_moves: list[str]


class NextStep(ToolOutput):
    action: str
    owner: str
    due: str


class ClientReportingOutput(ToolOutput):
    executive_summary: ExecutiveSummary
    performance_metrics: list[Metric]
    campaign_performance: list[CampaignResult]
    competitive_analysis: CompetitiveSnapshot
    next_steps: list[NextStep]


def build(data: ClientReportingInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "an agency account director writing client performance reports",
        (
            f"Write a performance report for {data.client_name} ({data.industry}) covering "
            f"{data.reporting_period} across {', '.join(data.channels)}. Client goal: {data.goals}."
        ),
        data,
        ClientReportingOutput,
        guidance=[
            "Use realistic, internally consistent numbers and percentage changes",
            "trend values are up, down or flat",
            "Give three to five concrete nextSteps with an owner and due date",
        ],
    )


def fallback(data: ClientReportingInput) -> ClientReportingOutput:
    seed = f"{data.client_name}|{data.reporting_period}"
    growth = 5 + stable_variation(seed, 16)
    channels = data.channels or ["SEO"]
    metrics = [
        Metric(name="Website Sessions", value=f"{12000 + 250 * growth:,}", change=f"+{growth}%", trend="up"),
        Metric(name="Leads", value=str(180 + 6 * growth), change=f"+{growth + 3}%", trend="up"),
        Metric(name="Conversion Rate", value=f"{2.4 + growth / 20:.1f}%", change="+0.3pp", trend="up"),
        Metric(name="Cost per Lead", value=f"${42 - growth // 2}", change=f"-{growth // 2}%", trend="down"),
    ]
    campaigns = [
        CampaignResult(
            channel=channel,
            spend=f"${1500 + 500 * i:,}",
            results=f"{60 + 15 * i} conversions",
            roi=f"{180 + growth * (i + 1)}%",
            notes=f"{channel} supported the goal to {data.goals}",
        )
        for i, channel in enumerate(channels)
    ]
    return ClientReportingOutput(
        executive_summary=ExecutiveSummary(
            overview=(
                f"Over {data.reporting_period}, {data.client_name} grew sessions {growth}% with steady lead growth "
                f"across {len(channels)} channels."
            ),
            key_wins=[f"{channels[0]} delivered the highest ROI", f"Leads grew {growth + 3}%"],
            areas_for_improvement=["Landing page conversion on mobile", "Email list growth"],
        ),
        performance_metrics=metrics,
        campaign_performance=campaigns,
        competitive_analysis=CompetitiveSnapshot(
            market_position=f"Gaining share in {data.industry}",
            competitor_moves=["Competitors increased paid search bids", "New entrant launched a content hub"],
        ),
        next_steps=[
            NextStep(action="Launch landing page A/B test", owner="Agency", due="Next 2 weeks"),
            NextStep(action=f"Reallocate 10% of budget toward {channels[0]}", owner="Agency", due="Next month"),
            NextStep(action="Approve Q3 content calendar", owner=data.client_name, due="Next review"),
        ],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=ClientReportingInput,
    output_model=ClientReportingOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
