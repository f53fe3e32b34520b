import logging
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from app.learning_map import (
    ExpansionFailedError,
    ExpansionTimeoutError,
    GenerationTimeoutError,
    GeneratorError,
    InvalidGraphError,
    LearningMap,
    LearningMapError,
    MapGenerator,
    NodeBusyError,
    UnknownNodeError,
    UnknownSessionError,
    parse_learning_map,
)
from app.learning_map.coordinator import ExpansionCoordinator
from app.llm_pipelines import GenerateMapPipeline
from app.models import ExpandRequest, MapView, TopicRequest
from app.sessions import SessionStore
from app.settings import settings

logging.basicConfig(
    level=settings.log_level, format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

client = AsyncOpenAI(
    api_key=settings.openai_api_key,
    base_url=str(settings.openai_base_url),
    timeout=settings.generation_timeout,
)

generate_map_pipeline = GenerateMapPipeline(
    client=client, model=settings.model_name, language=settings.language
)

session_store = SessionStore(
    timeout=settings.generation_timeout,
    layout_options=settings.layout_options,
    max_sessions=settings.max_sessions,
)

app = FastAPI(
    title='Learning Map API',
    description=(
        'Interactive learning maps:\n'
        '1) POST /maps: topic => new map session with a laid out map.\n'
        '2) POST /maps/{session_id}/expand: node => map grown with a sub-map under that node.'
    ),
    version='1.0.0',
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=False,
    allow_methods=['*'],
    allow_headers=['*'],
)

# most specific first
ERROR_STATUS: list[tuple[type[LearningMapError], int]] = [
    (UnknownSessionError, status.HTTP_404_NOT_FOUND),
    (UnknownNodeError, status.HTTP_404_NOT_FOUND),
    (NodeBusyError, status.HTTP_409_CONFLICT),
    (ExpansionTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (GenerationTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (ExpansionFailedError, status.HTTP_502_BAD_GATEWAY),
    (GeneratorError, status.HTTP_502_BAD_GATEWAY),
    (InvalidGraphError, status.HTTP_502_BAD_GATEWAY),
]


def error_status(error: LearningMapError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def get_generator() -> MapGenerator:
    return generate_map_pipeline


def get_session_store() -> SessionStore:
    return session_store


Generator = Annotated[MapGenerator, Depends(get_generator)]
Sessions = Annotated[SessionStore, Depends(get_session_store)]


def map_view(session_id: str, coordinator: ExpansionCoordinator) -> MapView:
    return MapView(
        session_id=session_id,
        topic=coordinator.topic,
        expanding=sorted(coordinator.expanding),
        map=coordinator.render(),
    )


@app.get('/generate-map')
async def generator_ready():
    """Generator health check"""
    return {'message': 'Map generator ready', 'model': settings.model_name}


@app.post('/generate-map', response_model=LearningMap, summary='Generate a standalone map')
async def generate_map(request: TopicRequest, generator: Generator):
    """Generate a learning map for a topic without starting a session"""
    try:
        return parse_learning_map(await generator.generate(request.topic))
    except LearningMapError as e:
        logger.error('Map generation for %r failed: %s', request.topic, e)
        raise HTTPException(
            status_code=error_status(e), detail=f'Failed to generate map: {e}'
        ) from e


@app.post('/maps', response_model=MapView, status_code=status.HTTP_201_CREATED)
async def create_map(request: TopicRequest, generator: Generator, sessions: Sessions):
    """Start a session with a freshly generated map for the topic"""
    session_id, coordinator = sessions.create(generator)
    try:
        await coordinator.submit_topic(request.topic)
    except LearningMapError as e:
        sessions.drop(session_id)
        raise HTTPException(
            status_code=error_status(e), detail=f'Failed to generate map: {e}'
        ) from e
    return map_view(session_id, coordinator)


@app.get('/maps/{session_id}', response_model=MapView)
async def get_map(session_id: str, sessions: Sessions):
    """Current map of a session, including nodes being expanded"""
    try:
        coordinator = sessions.get(session_id)
    except UnknownSessionError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e)) from e
    return map_view(session_id, coordinator)


@app.post('/maps/{session_id}/expand', response_model=MapView, summary='Expand a map node')
async def expand_node(session_id: str, request: ExpandRequest, sessions: Sessions):
    """Grow the map with a generated sub-map under one node"""
    try:
        coordinator = sessions.get(session_id)
        await coordinator.expand(request.node_id, request.topic)
    except LearningMapError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e)) from e
    return map_view(session_id, coordinator)


@app.delete('/maps/{session_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_map(session_id: str, sessions: Sessions):
    """End a session and forget its map"""
    try:
        sessions.drop(session_id)
    except UnknownSessionError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e)) from e


@app.get('/', include_in_schema=False)
async def root():
    """Redirect to docs on root"""
    return {'ok': True, 'see': '/docs'}
