"""Pydantic models for Cucumber JSON reports."""

from collections.abc import Sequence

from pydantic import BaseModel, TypeAdapter


class CucumberResult(BaseModel):
    """Result block of a step or hook."""

    status: str
    duration: float | None = None
    error_message: str | None = None


class CucumberHook(BaseModel):
    """A before/after hook entry."""

    result: CucumberResult


class CucumberStep(BaseModel):
    """A step, or a hook reported as a hidden step."""

    keyword: str = ""
    name: str = ""
    hidden: bool = False
    result: CucumberResult


class CucumberElement(BaseModel):
    """A scenario or background."""

    id: str | None = None
    keyword: str = ""
    name: str = ""
    type: str = "scenario"
    steps: Sequence[CucumberStep] = ()
    before: Sequence[CucumberHook] = ()
    after: Sequence[CucumberHook] = ()


class CucumberFeature(BaseModel):
    """A feature with its elements."""

    id: str | None = None
    uri: str | None = None
    keyword: str = ""
    name: str = ""
    elements: Sequence[CucumberElement] = ()


cucumber_report_adapter: TypeAdapter[list[CucumberFeature]] = TypeAdapter(
    list[CucumberFeature]
)
