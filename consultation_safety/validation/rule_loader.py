"""
Validation Rule Loader

Loads the clinical rule catalog from validation_rules.yaml into an
immutable, typed RuleCatalog. The catalog is built once and injected into
the ValidationEngine; nothing mutates it afterwards.
"""

import yaml
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, List, Tuple, Any
from pydantic import BaseModel, Field, ValidationError, field_validator
from functools import lru_cache

from ..config.constants import RuleCategory, RuleKind, RuleSeverity, ENFORCED_RULE_IDS
from ..utils.error_handler import CatalogError, ErrorCode, catalog_not_found_error
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent.parent / "config" / "validation_rules.yaml"


class ValidationRule(BaseModel):
    """Metadata for one catalog rule"""

    id: str = Field(..., description="Stable rule identifier")
    category: RuleCategory = Field(..., description="critical, warning or info")
    field: str = Field(..., description="Record field the rule is about")
    rule_kind: RuleKind = Field(..., description="Kind of check (required, consistency, ...)")
    message: str = Field(..., description="Message template")
    severity: RuleSeverity = Field(..., description="Documented severity (high, medium, low)")
    suggestion: Optional[str] = Field(None, description="Suggestion template")
    correction: Optional[str] = Field(None, description="Correction template")
    enforced: bool = Field(True, description="Whether a checker emits this rule")

    class Config:
        frozen = True

    def format_message(self, **values: Any) -> str:
        return self.message.format(**values)

    def format_suggestion(self, **values: Any) -> str:
        return (self.suggestion or "").format(**values)

    def format_correction(self, **values: Any) -> Optional[str]:
        if self.correction is None:
            return None
        return self.correction.format(**values)


class VitalSignGroup(BaseModel):
    """One vital sign of the minimum set and the keys that record it"""

    label: str = Field(..., description="Display label (e.g. presión arterial)")
    keys: Tuple[str, ...] = Field(..., min_length=1, description="Record keys that count as this sign")

    class Config:
        frozen = True


class CatalogThresholds(BaseModel):
    """Numeric limits used by the checkers"""

    pediatric_age: int = Field(18, description="Aspirin is contraindicated below this age")
    geriatric_age: int = Field(65, description="Benzodiazepines are flagged above this age")
    vague_diagnosis_max_length: int = Field(20, description="Vague diagnoses shorter than this are flagged")
    current_condition_min_length: int = Field(50, description="Shorter current-condition text is flagged")

    class Config:
        frozen = True


class RuleCatalog(BaseModel):
    """
    Read-only clinical rule catalog.

    Holds the rule metadata plus every keyword list and threshold the field
    checkers match against, so that updating terminology never touches
    checker code.
    """

    version: str = Field(..., description="Catalog version")
    rules: Tuple[ValidationRule, ...] = Field(default_factory=tuple)
    diagnosis_treatment_patterns: Mapping[str, Tuple[str, ...]] = Field(
        default_factory=dict,
        validate_default=True,
        description="Condition keyword -> expected treatment keywords"
    )
    high_risk_medications: Tuple[str, ...] = Field(default_factory=tuple)
    pediatric_contraindicated_medications: Tuple[str, ...] = Field(default_factory=tuple)
    geriatric_risk_medications: Tuple[str, ...] = Field(default_factory=tuple)
    vague_diagnosis_terms: Tuple[str, ...] = Field(default_factory=tuple)
    follow_up_terms: Tuple[str, ...] = Field(default_factory=tuple)
    patient_education_terms: Tuple[str, ...] = Field(default_factory=tuple)
    vital_sign_keys: Tuple[VitalSignGroup, ...] = Field(default_factory=tuple)
    thresholds: CatalogThresholds = Field(default_factory=CatalogThresholds)

    class Config:
        frozen = True

    @field_validator("diagnosis_treatment_patterns", mode="after")
    @classmethod
    def _read_only_patterns(cls, value):
        return MappingProxyType(dict(value))

    def get_rule(self, rule_id: str) -> ValidationRule:
        """
        Get a rule by id.

        Raises:
            CatalogError: If the catalog has no such rule
        """
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        raise CatalogError(
            f"Rule '{rule_id}' is not defined in catalog {self.version}",
            code=ErrorCode.CATALOG_RULE_MISSING,
            details={'rule_id': rule_id}
        )

    def has_rule(self, rule_id: str) -> bool:
        return any(rule.id == rule_id for rule in self.rules)

    def get_rules_for_field(self, field: str) -> List[ValidationRule]:
        return [rule for rule in self.rules if rule.field == field]

    def enforced_rules(self) -> List[ValidationRule]:
        return [rule for rule in self.rules if rule.enforced]


class RuleLoader:
    """
    Loads the rule catalog from YAML configuration.

    The parsed catalog is cached on the loader; call reload_catalog() to
    pick up edits to the file.
    """

    def __init__(self, rules_path: Optional[Path] = None):
        """
        Initialize the RuleLoader.

        Args:
            rules_path: Path to validation_rules.yaml. If None, uses the packaged catalog.
        """
        self.rules_path = Path(rules_path) if rules_path is not None else DEFAULT_RULES_PATH
        self._catalog: Optional[RuleCatalog] = None

    def load_catalog(self, force_reload: bool = False) -> RuleCatalog:
        """
        Load the rule catalog from the YAML file.

        Args:
            force_reload: If True, reload even if already loaded

        Returns:
            RuleCatalog

        Raises:
            CatalogError: If the file is missing, unparsable, off-schema, or
                lacks a rule the checkers reference
        """
        if self._catalog is not None and not force_reload:
            return self._catalog

        if not self.rules_path.exists():
            raise catalog_not_found_error(str(self.rules_path))

        try:
            with open(self.rules_path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogError(
                f"Failed to parse YAML file {self.rules_path}",
                code=ErrorCode.CATALOG_PARSE_ERROR,
                cause=e
            )

        catalog = self.parse_catalog(raw, source=str(self.rules_path))
        logger.info(
            "Rule catalog loaded",
            path=str(self.rules_path),
            version=catalog.version,
            rules=len(catalog.rules)
        )
        self._catalog = catalog
        return catalog

    @staticmethod
    def parse_catalog(raw: Any, source: str = "<memory>") -> RuleCatalog:
        """
        Build a RuleCatalog from already-parsed YAML data.

        Args:
            raw: Mapping as produced by yaml.safe_load
            source: Where the data came from, for error messages

        Returns:
            RuleCatalog

        Raises:
            CatalogError: If the data does not describe a valid catalog
        """
        if not isinstance(raw, dict):
            raise CatalogError(
                f"Validation rules in {source} must be a mapping",
                details={'source': source}
            )

        try:
            catalog = RuleCatalog(**raw)
        except ValidationError as e:
            raise CatalogError(
                f"Validation rules in {source} do not match the catalog schema",
                details={'source': source},
                cause=e
            )

        missing = [rule_id for rule_id in ENFORCED_RULE_IDS if not catalog.has_rule(rule_id)]
        if missing:
            raise CatalogError(
                f"Catalog {source} is missing rules used by the checkers: {', '.join(missing)}",
                code=ErrorCode.CATALOG_RULE_MISSING,
                details={'source': source, 'missing': missing}
            )

        return catalog

    def reload_catalog(self) -> RuleCatalog:
        """
        Force reload of the catalog from file.

        Returns:
            Reloaded RuleCatalog
        """
        return self.load_catalog(force_reload=True)


@lru_cache(maxsize=1)
def get_rule_loader() -> RuleLoader:
    """
    Get singleton instance of RuleLoader for the packaged catalog.

    Returns:
        RuleLoader instance
    """
    return RuleLoader()


def get_default_catalog() -> RuleCatalog:
    """Load (once) and return the packaged rule catalog."""
    return get_rule_loader().load_catalog()
