import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from app.flows import base, get_flow
from app.flows.analyze_and_rate_face import analyze_and_rate_face
from app.flows.base import FlowError
from app.flows.get_style_advice import get_style_advice
from app.flows.types import AnalyzeAndRateFaceInput, AnalyzeAndRateFaceOutput, StyleAdviceInput
from test_data import DATA_URI, SAMPLE_ANALYSIS


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_model(monkeypatch):
    def install(content=None, error=None):
        completions = FakeCompletions(content, error)
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        monkeypatch.setattr(base, "get_client", lambda: client)
        return completions
    return install


def face_input():
    return AnalyzeAndRateFaceInput(
        front_photo_data_uri=DATA_URI,
        left_photo_data_uri=DATA_URI,
        right_photo_data_uri=DATA_URI,
    )


def test_flows_are_registered_by_name():
    assert get_flow("analyzeAndRateFaceFlow") is analyze_and_rate_face
    assert get_flow("getStyleAdviceFlow") is get_style_advice


def test_face_analysis_returns_validated_output(fake_model):
    completions = fake_model(json.dumps(SAMPLE_ANALYSIS))

    result = analyze_and_rate_face(face_input())

    assert isinstance(result, AnalyzeAndRateFaceOutput)
    assert result.face_shape.shape == "Oval"
    assert [r.name for r in result.feature_ratings] == ["Jawline", "Forehead", "Nose", "Cheekbones"]

    request = completions.calls[0]
    assert request["response_format"] == {"type": "json_object"}
    user_content = request["messages"][1]["content"]
    images = [part for part in user_content if part["type"] == "image_url"]
    assert len(images) == 3
    assert all(part["image_url"]["url"] == DATA_URI for part in images)


def test_face_analysis_rejects_bad_data_uri(fake_model):
    completions = fake_model(json.dumps(SAMPLE_ANALYSIS))

    with pytest.raises(FlowError):
        analyze_and_rate_face({
            "front_photo_data_uri": "https://example.com/face.png",
            "left_photo_data_uri": DATA_URI,
            "right_photo_data_uri": DATA_URI,
        })
    assert completions.calls == []


def test_rating_out_of_range_is_a_flow_error(fake_model):
    bad = {**SAMPLE_ANALYSIS, "feature_ratings": [{"name": "Nose", "rating": 12, "description": "x"}]}
    fake_model(json.dumps(bad))

    with pytest.raises(FlowError):
        analyze_and_rate_face(face_input())


@pytest.mark.parametrize("content", ["", "not json", json.dumps({"face_shape": {"shape": "Oval"}})])
def test_unusable_model_reply_is_a_flow_error(fake_model, content):
    fake_model(content)

    with pytest.raises(FlowError):
        analyze_and_rate_face(face_input())


def test_model_failure_is_a_flow_error(fake_model):
    fake_model(error=OpenAIError("rate limited"))

    with pytest.raises(FlowError) as exc_info:
        get_style_advice({"analysis_result": SAMPLE_ANALYSIS, "user_query": "What glasses suit me?"})
    assert exc_info.value.flow_name == "getStyleAdviceFlow"


def test_style_advice_prompt_includes_analysis_and_question(fake_model):
    completions = fake_model(json.dumps({"advice": "Try round frames."}))

    result = get_style_advice(StyleAdviceInput(
        analysis_result=SAMPLE_ANALYSIS,
        user_query="  What glasses suit me?  ",
    ))

    assert result.advice == "Try round frames."
    prompt = completions.calls[0]["messages"][1]["content"]
    assert "Face Shape: Oval" in prompt
    assert "- Cheekbones: Rating 7/10" in prompt
    assert '"What glasses suit me?"' in prompt


def test_style_advice_needs_a_question():
    with pytest.raises(ValueError):
        StyleAdviceInput(analysis_result=SAMPLE_ANALYSIS, user_query="   ")
