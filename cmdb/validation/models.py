"""
Schema data model

A TypeSchema is the runtime description of the attributes an entity carries.
Both CI-type and relationship-type schemas share this shape; the stored
variants live in cmdb.database.models and convert to TypeSchema through
``from_attributes``.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .rules import ConstraintRule, parse_rules


class AttributeDefinition(BaseModel):
    """One declared attribute of a schema"""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    # Kept as a plain string so a corrupt type name reaches the validators
    type: str = ""
    required: bool = False
    description: Optional[str] = None
    default: Any = None
    validation: Optional[Dict[str, Any]] = None

    _rules: Tuple[ConstraintRule, ...] = PrivateAttr(default=())

    def model_post_init(self, __context: Any) -> None:
        self._rules = parse_rules(self.validation)

    @property
    def rules(self) -> Tuple[ConstraintRule, ...]:
        """Constraint rules parsed from ``validation``, unknown names dropped"""
        return self._rules

    @property
    def has_default(self) -> bool:
        return self.default is not None


class TypeSchema(BaseModel):
    """An administrator-defined, named set of typed attribute declarations"""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    attributes: List[AttributeDefinition] = Field(default_factory=list)
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    def get_attribute(self, name: str) -> Optional[AttributeDefinition]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    @property
    def attribute_names(self) -> List[str]:
        return [attribute.name for attribute in self.attributes]
