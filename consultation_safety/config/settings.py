"""
Validator Settings

Options recognized by the consultation form integration, read from
environment variables when not passed explicitly.

Environment:
    CONSULTATION_SAFETY_REAL_TIME_VALIDATION  true/false (default true)
    CONSULTATION_SAFETY_DEBOUNCE_MS           integer milliseconds (default 1000)
    CONSULTATION_SAFETY_IS_VISIBLE            true/false (default true)
    CONSULTATION_SAFETY_RULES_PATH            alternate validation_rules.yaml
"""

from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_DEBOUNCE_MS


class ValidatorSettings(BaseSettings):
    """Settings for the validation panel"""

    model_config = SettingsConfigDict(
        env_prefix="CONSULTATION_SAFETY_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    real_time_validation: bool = Field(
        default=True,
        description="Re-evaluate automatically (debounced) while the record is edited"
    )
    debounce_ms: int = Field(
        default=DEFAULT_DEBOUNCE_MS,
        ge=0,
        description="Quiet period before a real-time evaluation"
    )
    is_visible: bool = Field(
        default=True,
        description="Caller-side gate on rendering the panel; no effect on results"
    )
    rules_path: Optional[Path] = Field(
        default=None,
        description="Alternate rule catalog; packaged catalog when None"
    )

    def build_engine(self):
        """Engine using the configured catalog."""
        from ..validation.rule_loader import RuleLoader, get_default_catalog
        from ..validation.validation_engine import ValidationEngine

        if self.rules_path is None:
            return ValidationEngine(catalog=get_default_catalog())
        return ValidationEngine(catalog=RuleLoader(self.rules_path).load_catalog())

    def build_scheduler(
        self,
        engine,
        on_validation_update: Callable[[Any], Any],
        **kwargs
    ):
        """
        Scheduler honouring real_time_validation and debounce_ms.

        Extra keyword arguments go to ReEvaluationScheduler.
        """
        from ..validation.scheduler import ReEvaluationScheduler

        return ReEvaluationScheduler(
            engine,
            on_validation_update,
            debounce_ms=self.debounce_ms,
            real_time_validation=self.real_time_validation,
            **kwargs
        )


def load_settings(**overrides) -> ValidatorSettings:
    """
    Build settings from the environment.

    Args:
        **overrides: Explicit values that win over the environment

    Returns:
        ValidatorSettings

    Raises:
        pydantic.ValidationError: If an environment value cannot be parsed
    """
    return ValidatorSettings(**overrides)
