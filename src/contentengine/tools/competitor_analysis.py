"""Competitor analysis with SWOT and positioning recommendations."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction, stable_variation

DEFINITION = ToolDefinition(
    id="competitor-analysis",
    name="Competitor Analysis Agent",
    description="Competitor profiles, SWOT and market gaps",
    category="Research",
)


class CompetitorAnalysisInput(ToolInput):
    your_business: str = Field(
        "Your Business",
        validation_alias=AliasChoices("yourBusiness", "your_business", "businessName", "company"),
        serialization_alias="yourBusiness",
    )
    competitors: StrList = Field(default_factory=lambda: ["Competitor A", "Competitor B"])
    industry: str = "general business"
    focus_areas: StrList = Field(default_factory=lambda: ["pricing", "content", "SEO"])


class CompetitorProfile(ToolOutput):
    name: str
    positioning: str
    strengths: list[str]
    weaknesses: list[str]
    estimated_market_share: str


class Swot(ToolOutput):
    strengths: list[str]
    weaknesses: list[str]
    opportunities: list[str]
    threats: list[str]


class StrategicRecommendation(ToolOutput):
    recommendation: str
    priority: str
    timeframe: str


class BenchmarkMetric(ToolOutput):
    metric: str
    you: str
    competitor_average: str


class CompetitorAnalysisOutput(ToolOutput):
    competitor_profiles: list[CompetitorProfile]
    swot_analysis: Swot
    competitive_advantages: list[str]
    market_gaps: list[str]
    strategic_recommendations: list[StrategicRecommendation]
    performance_metrics: list[BenchmarkMetric]


POSITIONING = ["premium all-in-one suite", "low-cost self-serve option", "niche specialist", "enterprise-focused vendor"]


def build(data: CompetitorAnalysisInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "a competitive intelligence analyst",
        (
            f"Compare {data.your_business} with {', '.join(data.competitors)} in {data.industry}, "
            f"focusing on {', '.join(data.focus_areas)}."
        ),
        data,
        CompetitorAnalysisOutput,
        guidance=[
            "Profile every named competitor",
            "swotAnalysis is from the perspective of the user's business",
            "priority values are high, medium or low",
        ],
    )


def fallback(data: CompetitorAnalysisInput) -> CompetitorAnalysisOutput:
    competitors = data.competitors or ["Competitor A"]
    profiles = []
    for name in competitors:
        position = POSITIONING[stable_variation(name.lower(), len(POSITIONING))]
        share = 5 + stable_variation(f"share:{name.lower()}", 21)
        profiles.append(
            CompetitorProfile(
                name=name,
                positioning=position,
                strengths=["Established brand", f"Strong {data.focus_areas[0] if data.focus_areas else 'marketing'}"],
                weaknesses=["Slow product updates", "Generic messaging"],
                estimated_market_share=f"{share}%",
            )
        )
    return CompetitorAnalysisOutput(
        competitor_profiles=profiles,
        swot_analysis=Swot(
            strengths=["Faster customer response", "Focused offering"],
            weaknesses=["Smaller brand awareness", "Limited ad budget"],
            opportunities=[f"Underserved segments in {data.industry}", "Content gaps in competitor blogs"],
            threats=["Price cuts by larger players", "New entrants with funding"],
        ),
        competitive_advantages=[f"{data.your_business} can move faster than {competitors[0]}", "Closer customer relationships"],
        market_gaps=[f"Clear {area} guidance for small buyers" for area in data.focus_areas] or ["Transparent pricing"],
        strategic_recommendations=[
            StrategicRecommendation(
                recommendation=f"Publish comparison pages against {competitors[0]}", priority="high", timeframe="30 days"
            ),
            StrategicRecommendation(
                recommendation="Differentiate on onboarding and support", priority="medium", timeframe="60 days"
            ),
            StrategicRecommendation(
                recommendation="Track competitor pricing changes monthly", priority="low", timeframe="Ongoing"
            ),
        ],
        performance_metrics=[
            BenchmarkMetric(metric="Organic traffic", you="Baseline", competitor_average="1.5x baseline"),
            BenchmarkMetric(metric="Social following", you="Baseline", competitor_average="2x baseline"),
        ],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=CompetitorAnalysisInput,
    output_model=CompetitorAnalysisOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
