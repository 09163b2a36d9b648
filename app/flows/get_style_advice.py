from app.flows.base import define_flow
from app.flows.types import StyleAdviceInput, StyleAdviceOutput

SYSTEM_PROMPT = (
    "You are a world-class personal stylist and wellness coach. "
    "Return ONLY the requested JSON, without any additional text."
)


def render(flow_input: StyleAdviceInput) -> str:
    analysis = flow_input.analysis_result
    ratings = "\n".join(
        f"- {r.name}: Rating {r.rating:g}/10 ({r.description})"
        for r in analysis.feature_ratings
    )
    return f"""The user has shared their facial analysis and is asking for specific advice.

Based on the analysis and the question, give a concise, actionable and encouraging answer.
You can suggest clothing styles, accessories, grooming tips or facial exercises.

USER'S FACIAL ANALYSIS:
- Face Shape: {analysis.face_shape.shape} ({analysis.face_shape.description})
{ratings}

USER'S QUESTION:
"{flow_input.user_query}"

Reply with JSON in exactly this format:
{{"advice": ""}}"""


get_style_advice = define_flow(
    name="getStyleAdviceFlow",
    input_schema=StyleAdviceInput,
    output_schema=StyleAdviceOutput,
    system_prompt=SYSTEM_PROMPT,
    render=render,
)
