from pydantic import BaseModel, Field, field_validator
from typing import List
import re

DATA_URI_PATTERN = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$')


def _check_data_uri(value: str) -> str:
    if not DATA_URI_PATTERN.match(value):
        raise ValueError("Expected a data URI of the form 'data:<mimetype>;base64,<encoded_data>'")
    return value


class AnalyzeAndRateFaceInput(BaseModel):
    """Three photos of the user's face as base64 data URIs."""
    front_photo_data_uri: str = Field(description="A front-facing photo of the user's face.")
    left_photo_data_uri: str = Field(description="A photo of the left profile of the user's face.")
    right_photo_data_uri: str = Field(description="A photo of the right profile of the user's face.")

    @field_validator("front_photo_data_uri", "left_photo_data_uri", "right_photo_data_uri")
    @classmethod
    def validate_data_uri(cls, value: str) -> str:
        return _check_data_uri(value)


class FeatureRating(BaseModel):
    name: str = Field(description="The facial feature being rated, e.g. 'Jawline'.")
    rating: float = Field(ge=1, le=10, description="A rating of the feature from 1 to 10.")
    description: str = Field(description="A brief, neutral analysis of the feature.")


class FaceShape(BaseModel):
    shape: str = Field(description="The identified face shape, e.g. Oval, Square, Round.")
    description: str = Field(description="A brief, neutral description of the face shape.")


class AnalyzeAndRateFaceOutput(BaseModel):
    face_shape: FaceShape
    feature_ratings: List[FeatureRating] = Field(min_length=1)


class StyleAdviceInput(BaseModel):
    analysis_result: AnalyzeAndRateFaceOutput
    user_query: str = Field(min_length=1, description="The user's question about style or exercises.")

    @field_validator("user_query")
    @classmethod
    def strip_query(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("The question cannot be empty")
        return value


class StyleAdviceOutput(BaseModel):
    advice: str = Field(min_length=1, description="The personalized advice or exercise recommendation.")
