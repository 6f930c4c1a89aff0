"""Local SEO audit and action plan."""

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import StrList, ToolInput, ToolOutput, ToolSpec, make_instruction, stable_variation

DEFINITION = ToolDefinition(
    id="local-seo",
    name="Local SEO Booster",
    description="Local search audit, review strategy and citation plan",
    category="Local SEO",
)


class LocalSeoInput(ToolInput):
    business_name: str = Field(
        "Your Business",
        validation_alias=AliasChoices("businessName", "business_name", "company"),
        serialization_alias="businessName",
    )
    location: str = Field(
        "your city",
        validation_alias=AliasChoices("location", "city", "address", "serviceArea"),
        serialization_alias="location",
    )
    business_type: str = Field(
        "local business",
        validation_alias=AliasChoices("businessType", "business_type", "category", "industry"),
        serialization_alias="businessType",
    )
    website: str = "not provided"
    keywords: StrList = Field(default_factory=list)
    competitors: StrList = Field(default_factory=list)


class LocalOverview(ToolOutput):
    local_visibility_score: int = Field(..., ge=0, le=100)
    google_business_profile_score: int = Field(..., ge=0, le=100)
    citation_consistency: int = Field(..., ge=0, le=100)
    review_score: float = Field(..., ge=0, le=5)
    summary: str


class AuditItem(ToolOutput):
    item: str
    status: str
    recommendation: str


class ContentIdea(ToolOutput):
    title: str
    target_keyword: str
    format: str


class ReviewManagement(ToolOutput):
    current_rating: float = Field(..., ge=0, le=5)
    monthly_review_target: int = Field(..., ge=0)
    response_templates: list[str]
    acquisition_tactics: list[str]


class LocalCompetitor(ToolOutput):
    name: str
    estimated_reviews: int = Field(..., ge=0)
    strengths: list[str]
    opportunity: str


class ActionItem(ToolOutput):
    week: str
    task: str
    priority: str


class LocalSeoOutput(ToolOutput):
    overview: LocalOverview
    technical_audit: list[AuditItem]
    content_strategy: list[ContentIdea]
    review_management: ReviewManagement
    competitor_analysis: list[LocalCompetitor]
    action_plan: list[ActionItem]


def _scores(seed: str) -> tuple[int, int, int, float]:
    """Input-derived scores, stable across calls for the same business and location."""
    visibility = 55 + stable_variation(f"vis:{seed}", 31)
    profile = 50 + stable_variation(f"gbp:{seed}", 41)
    citations = 60 + stable_variation(f"cit:{seed}", 31)
    rating = round(3.6 + stable_variation(f"rev:{seed}", 13) / 10, 1)
    return visibility, profile, citations, rating


def build(data: LocalSeoInput) -> GenerationInstruction:
    keywords = data.keywords or [f"{data.business_type} near me", f"{data.business_type} {data.location}"]
    return make_instruction(
        DEFINITION.id,
        "a local SEO consultant",
        f"Audit the local search presence of {data.business_name}, a {data.business_type} in {data.location}.",
        data,
        LocalSeoOutput,
        guidance=[
            f"Prioritize these local keywords: {', '.join(keywords)}",
            "Scores are 0-100; ratings are 0-5",
            "actionPlan runs week by week for the next month",
        ],
    )


def fallback(data: LocalSeoInput) -> LocalSeoOutput:
    seed = f"{data.business_name.lower()}|{data.location.lower()}"
    visibility, profile, citations, rating = _scores(seed)
    keywords = data.keywords or [f"{data.business_type} near me", f"{data.business_type} in {data.location}"]
    competitors = data.competitors or [f"Top-rated {data.business_type} in {data.location}"]
    return LocalSeoOutput(
        overview=LocalOverview(
            local_visibility_score=visibility,
            google_business_profile_score=profile,
            citation_consistency=citations,
            review_score=rating,
            summary=f"{data.business_name} has room to grow in {data.location} local search results.",
        ),
        technical_audit=[
            AuditItem(
                item="Google Business Profile",
                status="needs work" if profile < 75 else "good",
                recommendation="Complete every profile field and add weekly photos",
            ),
            AuditItem(
                item="NAP consistency",
                status="needs work" if citations < 80 else "good",
                recommendation="Use identical name, address and phone across directories",
            ),
            AuditItem(
                item="Local schema markup",
                status="missing" if data.website == "not provided" else "review",
                recommendation="Add LocalBusiness structured data to the homepage",
            ),
        ],
        content_strategy=[
            ContentIdea(title=f"{data.business_type.title()} guide for {data.location}", target_keyword=keywords[0], format="Blog post"),
            ContentIdea(title=f"Serving {data.location}: our story", target_keyword=keywords[-1], format="Location page"),
        ],
        review_management=ReviewManagement(
            current_rating=rating,
            monthly_review_target=8 if rating < 4.5 else 5,
            response_templates=[
                "Thank you for the kind words! We look forward to seeing you again.",
                "We are sorry to hear this. Please contact us so we can make it right.",
            ],
            acquisition_tactics=["Ask in person after service", "Send a review link by SMS", "Add a QR code at checkout"],
        ),
        competitor_analysis=[
            LocalCompetitor(
                name=name,
                estimated_reviews=40 + stable_variation(name.lower(), 160),
                strengths=["More reviews", "Frequent profile posts"],
                opportunity=f"Out-publish {name} on local content",
            )
            for name in competitors
        ],
        action_plan=[
            ActionItem(week="Week 1", task="Optimize Google Business Profile", priority="high"),
            ActionItem(week="Week 2", task="Fix citation inconsistencies", priority="high"),
            ActionItem(week="Week 3", task="Launch review request routine", priority="medium"),
            ActionItem(week="Week 4", task="Publish first location page", priority="medium"),
        ],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=LocalSeoInput,
    output_model=LocalSeoOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
