from typing import Annotated

from pydantic import BaseModel, StringConstraints

from app.learning_map import RenderedMap

Topic = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class TopicRequest(BaseModel):
    topic: Topic


class ExpandRequest(BaseModel):
    node_id: str
    # overrides the node label as the generator topic
    topic: Topic | None = None


class MapView(BaseModel):
    session_id: str
    topic: str | None
    expanding: list[str]
    map: RenderedMap
