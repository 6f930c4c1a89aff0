"""Landing page copy and conversion analysis."""

from enum import Enum

from pydantic import AliasChoices, Field

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.tools.base import ToolInput, ToolOutput, ToolSpec, classify, make_instruction

DEFINITION = ToolDefinition(
    id="landing-page",
    name="Landing Page Optimization Analyzer",
    description="Conversion-focused landing page copy and layout review",
    category="Conversion",
)


class LandingPageInput(ToolInput):
    url: str = Field(
        "",
        validation_alias=AliasChoices("url", "pageUrl", "page_url", "landingPageUrl"),
        serialization_alias="url",
    )
    product_name: str = Field(
        "Your Product",
        validation_alias=AliasChoices("productName", "product_name", "product", "businessName"),
        serialization_alias="productName",
    )
    target_audience: str = Field(
        "potential customers",
        validation_alias=AliasChoices("targetAudience", "target_audience", "audience"),
        serialization_alias="targetAudience",
    )
    conversion_goal: str = Field(
        "sign up",
        validation_alias=AliasChoices("conversionGoal", "conversion_goal", "goal"),
        serialization_alias="conversionGoal",
    )
    value_proposition: str = "save time and grow faster"


class HeroSection(ToolOutput):
    headline: str
    subheadline: str
    cta_text: str
    visual_suggestion: str


class Feature(ToolOutput):
    title: str
    description: str


class Testimonial(ToolOutput):
    quote: str
    author: str
    role: str


class CallToAction(ToolOutput):
    primary: str
    secondary: str
    placement: list[str]


class FormCopy(ToolOutput):
    fields: list[str]
    button_text: str
    privacy_note: str


class Faq(ToolOutput):
    question: str
    answer: str


class SeoElements(ToolOutput):
    title_tag: str
    meta_description: str
    h1: str


class LandingPageOutput(ToolOutput):
    headline: str
    hero_section: HeroSection
    features: list[Feature]
    benefits: list[str]
    testimonials: list[Testimonial]
    cta: CallToAction
    form_copy: FormCopy
    faqs: list[Faq]
    social_proof: list[str]
    design_layout: list[str]
    seo_elements: SeoElements


class ConversionGoal(str, Enum):
    PURCHASE = "purchase"
    DEMO = "demo"
    DOWNLOAD = "download"
    SIGNUP = "signup"


GOAL_KEYWORDS = {
    ConversionGoal.PURCHASE: ("buy", "purchase", "order", "sale"),
    ConversionGoal.DEMO: ("demo", "call", "consult", "meeting"),
    ConversionGoal.DOWNLOAD: ("download", "ebook", "guide", "whitepaper"),
}

CTA_TEXT: dict[ConversionGoal, tuple[str, str]] = {
    ConversionGoal.PURCHASE: ("Buy Now", "See Pricing"),
    ConversionGoal.DEMO: ("Book a Demo", "Watch a 2-Minute Tour"),
    ConversionGoal.DOWNLOAD: ("Download Free Guide", "Preview the Contents"),
    ConversionGoal.SIGNUP: ("Start Free Trial", "See How It Works"),
}

FORM_FIELDS: dict[ConversionGoal, list[str]] = {
    ConversionGoal.PURCHASE: ["Email", "Payment details"],
    ConversionGoal.DEMO: ["Name", "Work email", "Company", "Team size"],
    ConversionGoal.DOWNLOAD: ["First name", "Email"],
    ConversionGoal.SIGNUP: ["Email", "Password"],
}


def build(data: LandingPageInput) -> GenerationInstruction:
    return make_instruction(
        DEFINITION.id,
        "a conversion rate optimization specialist and landing page copywriter",
        (
            f"Analyze the landing page at {data.url} for {data.product_name} and write optimized copy "
            f"that gets {data.target_audience} to {data.conversion_goal}."
        ),
        data,
        LandingPageOutput,
        guidance=[
            f"Core value proposition: {data.value_proposition}",
            "designLayout lists page sections top to bottom",
            "Keep the form to the fewest fields the conversion goal allows",
        ],
    )


def fallback(data: LandingPageInput) -> LandingPageOutput:
    goal = classify(data.conversion_goal, GOAL_KEYWORDS, ConversionGoal.SIGNUP)
    primary_cta, secondary_cta = CTA_TEXT[goal]
    headline = f"{data.product_name}: {data.value_proposition.capitalize()}"
    return LandingPageOutput(
        headline=headline,
        hero_section=HeroSection(
            headline=headline,
            subheadline=f"Built for {data.target_audience} who want results without the busywork.",
            cta_text=primary_cta,
            visual_suggestion=f"Product screenshot of {data.product_name} in use",
        ),
        features=[
            Feature(title="Fast setup", description=f"Get started with {data.product_name} in minutes."),
            Feature(title="Clear results", description="See progress on one simple dashboard."),
            Feature(title="Support included", description="Talk to a real person when you need help."),
        ],
        benefits=[
            data.value_proposition.capitalize(),
            "Less time on manual work",
            f"Confidence that {data.target_audience} get what they need",
        ],
        testimonials=[
            Testimonial(
                quote=f"{data.product_name} paid for itself in the first month.",
                author="Customer name",
                role=f"One of your {data.target_audience}",
            )
        ],
        cta=CallToAction(primary=primary_cta, secondary=secondary_cta, placement=["Hero", "After features", "Footer"]),
        form_copy=FormCopy(
            fields=FORM_FIELDS[goal],
            button_text=primary_cta,
            privacy_note="We never share your details.",
        ),
        faqs=[
            Faq(question=f"Who is {data.product_name} for?", answer=f"It is designed for {data.target_audience}."),
            Faq(question="How long does setup take?", answer="Most customers are running within a day."),
        ],
        social_proof=["Customer logos strip", "Star rating summary", "Case study link"],
        design_layout=["Hero with CTA", "Logo bar", "Features", "Testimonials", "FAQ", "Final CTA"],
        seo_elements=SeoElements(
            title_tag=f"{data.product_name} | {data.value_proposition.capitalize()}"[:60],
            meta_description=f"{data.product_name} helps {data.target_audience} {data.value_proposition}. {primary_cta} today."[:160],
            h1=headline,
        ),
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    input_model=LandingPageInput,
    output_model=LandingPageOutput,
    builder=build,
    fallback=fallback,
    missing_section_policy=MissingSectionPolicy.PATCH,
    required_fields=("url",),
)
