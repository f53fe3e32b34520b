"""Prompts for learning map generation pipeline"""

import pathlib

from iso639 import Language
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from openai.types.chat import ChatCompletionMessageParam
from pydantic import BaseModel

here = pathlib.Path(__file__).parent.resolve()
jinja_env = Environment(loader=FileSystemLoader(str(here)), undefined=StrictUndefined)


def generate_map_prompt(
    *,
    topic: str,
    language: str,
    response_model: type[BaseModel],
    min_nodes: int = 3,
    max_nodes: int = 8,
) -> list[ChatCompletionMessageParam]:
    """Creates prompt for generating a learning map of a single topic."""

    system_template = jinja_env.get_template('system.md.jinja')
    user_template = jinja_env.get_template('generate-map.md.jinja')
    language_name = Language.match(language).name

    return [
        {
            'role': 'system',
            'content': system_template.render(language=language_name),
        },
        {
            'role': 'user',
            'content': user_template.render(
                topic=topic,
                json_schema=response_model.model_json_schema(),
                min_nodes=min_nodes,
                max_nodes=max_nodes,
            ),
        },
    ]


__all__ = ['generate_map_prompt']
