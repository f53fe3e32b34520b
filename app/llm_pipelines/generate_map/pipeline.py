import logging

from openai import AsyncOpenAI, OpenAIError

from app.learning_map.errors import GeneratorError
from app.learning_map.models import LearningMap
from app.llm_pipelines.generate_map.prompts import generate_map_prompt

logger = logging.getLogger(__name__)


class GenerateMapPipeline:
    """
    LLM pipeline producing a candidate learning map for a topic.

    Returns the raw JSON text of the completion. Parsing and validation belong
    to the learning map engine, which has to cope with malformed output anyway.
    """

    def __init__(self, client: AsyncOpenAI, model: str, language: str = 'en'):
        self._client: AsyncOpenAI = client
        self._model: str = model
        self._language: str = language

    async def generate(self, topic: str) -> str:
        """
        Generate a learning map for ``topic``.

        Parameters
        ----------
        topic : str
            Topic or node label to break down

        Returns
        -------
        str
            JSON text with ``nodes`` and ``edges``

        Raises
        ------
        ValueError
            If the topic is blank
        GeneratorError
            If the model call fails or returns no content
        """
        topic = topic.strip()
        if not topic:
            raise ValueError('Topic must not be empty')

        messages = generate_map_prompt(
            topic=topic, language=self._language, response_model=LearningMap
        )

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                response_format={'type': 'json_object'},
                temperature=0.2,
            )
        except OpenAIError as e:
            logger.error('Map generation for %r failed: %s', topic, e)
            raise GeneratorError(f'Content generator call failed: {e}') from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GeneratorError('No response from the content generator')

        logger.debug('Generated map for %r: %s', topic, content[:200])
        return content
