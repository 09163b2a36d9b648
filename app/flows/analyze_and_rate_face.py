from app.flows.base import define_flow
from app.flows.types import AnalyzeAndRateFaceInput, AnalyzeAndRateFaceOutput

RATED_FEATURES = ["Jawline", "Forehead", "Nose", "Cheekbones"]

SYSTEM_PROMPT = (
    "You are a facial analysis expert. You describe faces neutrally and objectively. "
    "Return ONLY the requested JSON, without any additional text."
)

PROMPT = f"""Analyze the user's face from the three photos provided (front view, left profile and right profile).

You MUST:
1. Identify the face shape (e.g. Oval, Square, Round, Heart, Diamond).
2. Rate each of these features from 1 to 10, where 1 is less prominent and 10 is very prominent: {", ".join(RATED_FEATURES)}.
3. Give a brief, objective description of each feature and of the overall face shape.
4. NOT give fashion advice, style recommendations or compliments.

Reply with JSON in exactly this format:
{{
  "face_shape": {{"shape": "", "description": ""}},
  "feature_ratings": [
    {{"name": "", "rating": 0, "description": ""}}
  ]
}}"""


def render(flow_input: AnalyzeAndRateFaceInput):
    views = [
        ("Front view", flow_input.front_photo_data_uri),
        ("Left profile", flow_input.left_photo_data_uri),
        ("Right profile", flow_input.right_photo_data_uri),
    ]
    content = [{"type": "text", "text": PROMPT}]
    for label, uri in views:
        content.append({"type": "text", "text": f"{label}:"})
        content.append({"type": "image_url", "image_url": {"url": uri}})
    return content


analyze_and_rate_face = define_flow(
    name="analyzeAndRateFaceFlow",
    input_schema=AnalyzeAndRateFaceInput,
    output_schema=AnalyzeAndRateFaceOutput,
    system_prompt=SYSTEM_PROMPT,
    render=render,
    temperature=0.2,
)
