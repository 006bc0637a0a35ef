"""Run configuration read from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from sheet_translator.batching import DEFAULT_BATCH_SIZE, DEFAULT_MAX_TEXT_LENGTH
from sheet_translator.dispatch import DEFAULT_PARALLEL_TASKS
from sheet_translator.providers.openai import DEFAULT_MODEL
from sheet_translator.retry import DEFAULT_MAX_RATE_LIMIT_RETRIES, DEFAULT_RETRIES

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def _int(environ: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def _bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    if raw.strip().lower() in TRUE_VALUES:
        return True
    if raw.strip().lower() in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class TranslatorConfig:
    """
    Tunables for one translation run.

    Durations are stored in seconds; the environment variables that set
    them are in milliseconds, except TASK_TIMEOUT_SECONDS.
    """
    parallel_tasks: int = DEFAULT_PARALLEL_TASKS
    batched_languages_size: int = DEFAULT_BATCH_SIZE
    max_text_length_for_batching: int = DEFAULT_MAX_TEXT_LENGTH
    model: str = DEFAULT_MODEL
    retries: int = DEFAULT_RETRIES
    retry_delay: float = 3.0
    max_rate_limit_retries: int = DEFAULT_MAX_RATE_LIMIT_RETRIES
    stagger_delay: float = 0.1
    window_cooldown: float = 1.0
    max_rate_limit_wait: Optional[float] = None
    task_timeout: Optional[float] = None
    source_language: str = "en"
    highlight_translated: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TranslatorConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read (default: os.environ)

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        timeout = _int(env, "TASK_TIMEOUT_SECONDS", 0)
        max_wait = _int(env, "RATE_LIMIT_MAX_WAIT_MS", 0)

        return cls(
            parallel_tasks=_int(env, "PARALLEL_TASKS", DEFAULT_PARALLEL_TASKS, minimum=1),
            batched_languages_size=_int(env, "BATCHED_LANGUAGES_SIZE", DEFAULT_BATCH_SIZE, minimum=1),
            max_text_length_for_batching=_int(
                env, "MAX_TEXT_LENGTH_FOR_BATCHING_LANGUAGES", DEFAULT_MAX_TEXT_LENGTH
            ),
            model=(env.get("OPENAI_MODEL") or DEFAULT_MODEL).strip(),
            retries=_int(env, "TRANSLATION_RETRIES", DEFAULT_RETRIES, minimum=1),
            retry_delay=_int(env, "TRANSLATION_RETRY_DELAY_MS", 3000) / 1000.0,
            max_rate_limit_retries=_int(env, "RATE_LIMIT_MAX_RETRIES", DEFAULT_MAX_RATE_LIMIT_RETRIES),
            stagger_delay=_int(env, "TASK_STAGGER_MS", 100) / 1000.0,
            window_cooldown=_int(env, "WINDOW_COOLDOWN_MS", 1000) / 1000.0,
            max_rate_limit_wait=max_wait / 1000.0 if max_wait > 0 else None,
            task_timeout=float(timeout) if timeout > 0 else None,
            source_language=(env.get("SOURCE_LANGUAGE") or "en").strip(),
            highlight_translated=_bool(env, "HIGHLIGHT_TRANSLATED", True),
        )
