"""Classifier API schemas."""

from pydantic import BaseModel


class TrainingEntry(BaseModel):
    text: str
    classes: list[str] = []


class TrainRequest(BaseModel):
    training_data: list[TrainingEntry]
    language: str = "en"
    name: str = "classifier"


class ClassifyRequest(BaseModel):
    text: str
