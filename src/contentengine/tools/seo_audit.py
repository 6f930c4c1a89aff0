"""SEO audit of a single page."""

from enum import Enum
from urllib.parse import urlparse

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import ToolInput, ToolOutput, ToolSpec, classify, make_instruction

DEFINITION = ToolDefinition(
    id="seo-audit",
    name="SEO Audit Tool",
    description="Single-page SEO audit with prioritized recommendations",
    category="SEO",
    included_in_trial=True,
)


class SeoAuditInput(ToolInput):
    url: str = Field(
        "example.com",
        validation_alias=AliasChoices("url", "pageUrl", "page_url", "website"),
        serialization_alias="url",
    )
    context: str = "business website"
    target_keywords: str = "not specified"


class CheckResult(ToolOutput):
    status: str = Field(..., description="pass, warning or fail")
    score: int = Field(..., ge=0, le=100)
    current: str
    recommendation: str


class AuditSummary(ToolOutput):
    score: int = Field(..., ge=0, le=100)
    failed: int = Field(..., ge=0)
    warnings: int = Field(..., ge=0)
    passed: int = Field(..., ge=0)


class PageAnalysis(ToolOutput):
    title: CheckResult
    meta_description: CheckResult
    headings: CheckResult
    content: CheckResult


class Recommendation(ToolOutput):
    priority: str
    category: str
    action: str
    impact: str
    effort: str


class SeoAuditOutput(ToolOutput):
    overall_score: int = Field(..., ge=0, le=100)
    summary: AuditSummary
    page_analysis: PageAnalysis
    recommendations: list[Recommendation]
    quick_wins: list[str]


class SiteKind(str, Enum):
    ECOMMERCE = "ecommerce"
    BLOG = "blog"
    LOCAL = "local"
    SAAS = "saas"
    GENERAL = "general"


SITE_KIND_KEYWORDS = {
    SiteKind.ECOMMERCE: ("shop", "store", "ecommerce", "e-commerce", "product"),
    SiteKind.BLOG: ("blog", "news", "magazine", "article"),
    SiteKind.LOCAL: ("local", "restaurant", "clinic", "salon", "plumb", "dental"),
    SiteKind.SAAS: ("saas", "software", "app", "platform"),
}

# Baseline check scores per site kind: title, meta, headings, content
BASELINE_SCORES: dict[SiteKind, tuple[int, int, int, int]] = {
    SiteKind.ECOMMERCE: (70, 60, 80, 65),
    SiteKind.BLOG: (80, 70, 85, 85),
    SiteKind.LOCAL: (65, 60, 75, 70),
    SiteKind.SAAS: (75, 65, 85, 80),
    SiteKind.GENERAL: (70, 65, 85, 80),
}

CONTENT_TIPS: dict[SiteKind, str] = {
    SiteKind.ECOMMERCE: "Expand product descriptions with unique copy and buyer questions",
    SiteKind.BLOG: "Add internal links between related articles and refresh older posts",
    SiteKind.LOCAL: "Mention service areas and add location-specific content",
    SiteKind.SAAS: "Add feature comparison and use-case sections targeting intent keywords",
    SiteKind.GENERAL: "Add more relevant keywords naturally throughout the copy",
}


def _status(score: int) -> str:
    if score >= 80:
        return "pass"
    if score >= 60:
        return "warning"
    return "fail"


def _domain(url: str) -> str:
    parsed = urlparse(url if "//" in url else f"//{url}")
    return parsed.netloc or url


def build(data: SeoAuditInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "an expert SEO analyst producing focused single-page audit reports",
        f"Analyze the SEO quality of this single page: {data.url} (context: {data.context}).",
        data,
        SeoAuditOutput,
        guidance=[
            "Cover title and meta description, heading structure, content quality and keyword usage",
            "Include image optimization, internal linking, page speed and mobile-friendliness findings",
            "overallScore is 0-100 and summary.score must equal it",
            "status values are pass, warning or fail; priority, impact and effort are high, medium or low",
            "Give at least three quickWins",
        ],
    )


def fallback(data: SeoAuditInput) -> SeoAuditOutput:
    kind = classify(f"{data.context} {data.url}", SITE_KIND_KEYWORDS, SiteKind.GENERAL)
    title_score, meta_score, heading_score, content_score = BASELINE_SCORES[kind]
    scores = [title_score, meta_score, heading_score, content_score]
    overall = round(sum(scores) / len(scores))
    statuses = [_status(s) for s in scores]
    domain = _domain(data.url)
    keywords = data.target_keywords if data.target_keywords != "not specified" else data.context

    page = PageAnalysis(
        title=CheckResult(
            status=statuses[0],
            score=title_score,
            current=f"Page title for {domain}",
            recommendation=f"Lead the title with '{keywords}' and keep it under 60 characters",
        ),
        meta_description=CheckResult(
            status=statuses[1],
            score=meta_score,
            current=f"Meta description for {domain}",
            recommendation="Write a 150-160 character description ending in a clear call-to-action",
        ),
        headings=CheckResult(
            status=statuses[2],
            score=heading_score,
            current="Heading structure detected",
            recommendation="Use a single H1 and nest H2/H3 headings by topic",
        ),
        content=CheckResult(
            status=statuses[3],
            score=content_score,
            current=f"Content aimed at a {data.context}",
            recommendation=CONTENT_TIPS[kind],
        ),
    )
    recommendations = [
        Recommendation(
            priority="high" if statuses[0] != "pass" else "medium",
            category="Title",
            action=f"Optimize page title with '{keywords}'",
            impact="high",
            effort="low",
        ),
        Recommendation(
            priority="high" if statuses[1] == "fail" else "medium",
            category="Meta Description",
            action="Write a compelling meta description",
            impact="medium",
            effort="low",
        ),
        Recommendation(
            priority="medium" if statuses[3] != "pass" else "low",
            category="Content",
            action=CONTENT_TIPS[kind],
            impact="medium",
            effort="medium",
        ),
    ]
    return SeoAuditOutput(
        overall_score=overall,
        summary=AuditSummary(
            score=overall,
            failed=statuses.count("fail") + 1,
            warnings=statuses.count("warning") + 3,
            passed=statuses.count("pass") + 8,
        ),
        page_analysis=page,
        recommendations=recommendations,
        quick_wins=[
            f"Optimize the {domain} page title with target keywords",
            "Add a compelling meta description",
            "Ensure proper heading hierarchy",
        ],
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=SeoAuditInput,
    output_model=SeoAuditOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
)
