"""Dependency wiring for the FastAPI app: config, startup checks, per-session engines."""

from functools import lru_cache

import structlog
from fastapi import Request

from cli.config import load_config_model
from cli.config_models import BoomerConfig
from llm import LLMError
from voice.engine import DialogueEngine
from voice.factory import Collaborators, create_collaborators, create_dialogue_engine
from web.auth import SessionUser
from web.sessions import SessionRegistry

logger = structlog.get_logger()


@lru_cache
def get_config() -> BoomerConfig:
    """Load shared config from the standard locations."""
    return load_config_model()


def verify_startup(config: BoomerConfig, collaborators: Collaborators | None = None) -> Collaborators:
    """Fail fast on missing credentials; returns the collaborators to share across sessions."""
    if not config.auth.secret():
        logger.critical("web.jwt_secret_missing", env=config.auth.jwt_secret_env)
        raise RuntimeError(f"{config.auth.jwt_secret_env} required")
    if collaborators is not None:
        return collaborators
    try:
        return create_collaborators(config)
    except LLMError as e:
        logger.critical("web.llm_unconfigured", error=str(e))
        raise RuntimeError(str(e)) from e
    except RuntimeError as e:
        logger.critical("web.speech_unconfigured", error=str(e))
        raise


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def build_engine(state, user: SessionUser) -> DialogueEngine:
    """Engine for one connection, bound to the authenticated user."""
    return create_dialogue_engine(
        state.config,
        state.store,
        state.collaborators,
        user_id=user.id,
        display_name=user.name,
    )
