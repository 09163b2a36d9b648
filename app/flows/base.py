"""
Named prompt templates bound to an input and output schema.

A flow validates its input, renders the prompt, sends it to the hosted
model with a JSON response format and validates the reply against the
output schema. Nothing is retried; every failure surfaces as FlowError.
"""
from functools import lru_cache
from typing import Any, Callable, Dict, Generic, List, Type, TypeVar, Union
import json
import logging

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from app.config.settings import settings

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

UserContent = Union[str, List[Dict[str, Any]]]


class FlowError(Exception):
    def __init__(self, flow_name: str, message: str):
        self.flow_name = flow_name
        super().__init__(f"{flow_name}: {message}")


@lru_cache()
def get_client() -> OpenAI:
    return OpenAI(api_key=settings.OPENAI_API_KEY)


class Flow(Generic[InputT, OutputT]):
    def __init__(
        self,
        name: str,
        input_schema: Type[InputT],
        output_schema: Type[OutputT],
        system_prompt: str,
        render: Callable[[InputT], UserContent],
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        self.name = name
        self.input_schema = input_schema
        self.output_schema = output_schema
        self.system_prompt = system_prompt
        self.render = render
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_messages(self, flow_input: InputT) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.render(flow_input)},
        ]

    def __call__(self, flow_input: Union[InputT, dict]) -> OutputT:
        if not isinstance(flow_input, self.input_schema):
            try:
                flow_input = self.input_schema.model_validate(flow_input)
            except ValidationError as e:
                raise FlowError(self.name, f"invalid input: {e}")

        logger.info(f"Running flow {self.name} with model {settings.OPENAI_MODEL}")
        try:
            response = get_client().chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=self.build_messages(flow_input),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"Model call failed in {self.name}: {str(e)}")
            raise FlowError(self.name, f"model call failed: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.error(f"Empty response from model in {self.name}")
            raise FlowError(self.name, "empty response")

        logger.debug(f"Raw response from {self.name}: {content}")

        try:
            return self.output_schema.model_validate(json.loads(content))
        except json.JSONDecodeError as e:
            logger.error(f"Could not decode JSON from {self.name}: {e}")
            raise FlowError(self.name, "response is not valid JSON")
        except ValidationError as e:
            logger.error(f"Response from {self.name} does not match {self.output_schema.__name__}: {e}")
            raise FlowError(self.name, "response does not match the output schema")


_registry: Dict[str, Flow] = {}


def define_flow(**kwargs) -> Flow:
    flow = Flow(**kwargs)
    if flow.name in _registry:
        raise ValueError(f"Flow already defined: {flow.name}")
    _registry[flow.name] = flow
    return flow


def get_flow(name: str) -> Flow:
    return _registry[name]
