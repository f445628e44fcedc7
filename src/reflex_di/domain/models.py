from collections.abc import Mapping
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field

from reflex_di.domain.enums import TypeKind
from reflex_di.domain.exceptions import InvalidArgumentError, InvalidDefinitionError

RAW_PREFIX = ":"


class ClassDescriptor(BaseModel):
    """Value object describing a provisionable class.

    Attributes:
        name: Canonical (lower-cased) type name used as the cache key.
        display_name: Name used in error messages.
        python_type: The class itself; absent for table-backed descriptors.
        kind: Whether the class is concrete, abstract or an interface.
        supertypes: Canonical names of every class the type is-a.
        factory: Callable producing a new instance; defaults to the class.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Canonical type name.")
    display_name: str = Field(..., description="Human readable type name.")
    python_type: Optional[Type] = Field(default=None, description="The reflected class, if any.")
    kind: TypeKind = Field(default=TypeKind.CONCRETE, description="Instantiability of the type.")
    supertypes: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Canonical names of all types this type satisfies.",
    )
    factory: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Factory used instead of calling the class directly.",
    )

    @property
    def is_instantiable(self) -> bool:
        return self.kind == TypeKind.CONCRETE and (self.factory is not None or self.python_type is not None)

    def new_instance(self, args: Tuple[Any, ...] = (), kwargs: Optional[Dict[str, Any]] = None) -> Any:
        """Create an instance from already resolved constructor arguments.

        Args:
            args: Positional arguments in declared order.
            kwargs: Keyword-only arguments.

        Returns:
            The new instance.
        """
        factory = self.factory if self.factory is not None else self.python_type
        if factory is None:
            raise TypeError(f"{self.display_name} has no factory")
        return factory(*args, **(kwargs or {}))


class ParameterDescriptor(BaseModel):
    """Value object describing one constructor parameter.

    Attributes:
        owner: Canonical name of the class declaring the constructor.
        position: 1-based ordinal position (``self`` excluded).
        name: Parameter name.
        annotation: Raw annotation or type name; ``None`` when untyped.
        has_default: Whether a default value is declared.
        default: The default value when ``has_default`` is set.
        keyword_only: Whether the parameter must be passed by keyword.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    owner: str = Field(..., description="Canonical name of the owning type.")
    position: int = Field(..., ge=1, description="1-based ordinal position.")
    name: str = Field(..., description="Parameter name.")
    annotation: Any = Field(default=None, description="Declared annotation, if any.")
    has_default: bool = Field(default=False, description="Whether a default value exists.")
    default: Any = Field(default=None, description="Default value.")
    keyword_only: bool = Field(default=False, description="Whether the parameter is keyword-only.")


class InjectionDefinition(BaseModel):
    """Per-type override map controlling how constructor parameters are resolved.

    A bare key (``"logger"``) names the type to provision for that parameter.
    A key prefixed with ``:`` (``":message"``) carries a raw value passed to the
    constructor as-is.

    Attributes:
        entries: Copy of the validated mapping, in insertion order.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    entries: Dict[str, Any] = Field(default_factory=dict, description="Validated definition entries.")

    @classmethod
    def from_mapping(cls, definition: Any) -> "InjectionDefinition":
        """Validate a caller supplied mapping and build a definition from a copy of it.

        Args:
            definition: Mapping of parameter names (or raw keys) to values.

        Returns:
            The validated definition.

        Raises:
            InvalidArgumentError: If ``definition`` is not a mapping.
            InvalidDefinitionError: If a bare key maps to something other than
                a type name or class.
        """
        if isinstance(definition, InjectionDefinition):
            return definition
        if not isinstance(definition, Mapping):
            raise InvalidArgumentError(
                f"Injection definitions must be mappings; {type(definition).__name__} specified"
            )

        for key, value in definition.items():
            if not isinstance(key, str):
                raise InvalidDefinitionError(repr(key), value)
            if key.startswith(RAW_PREFIX):
                continue
            if not isinstance(value, (str, type)):
                raise InvalidDefinitionError(key, value)

        return cls(entries=dict(definition))

    def has_type_for(self, parameter: str) -> bool:
        return parameter in self.entries

    def type_for(self, parameter: str) -> Any:
        return self.entries[parameter]

    def has_raw_for(self, parameter: str) -> bool:
        return RAW_PREFIX + parameter in self.entries

    def raw_for(self, parameter: str) -> Any:
        return self.entries[RAW_PREFIX + parameter]

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.entries)


class SharedInstanceSlot(BaseModel):
    """Tracks a shared type and its cached instance.

    A slot that is not populated is pending: the type is shared but will be
    built on its next resolution. ``None`` is a valid shared instance, so
    population is tracked separately from ``instance``.

    Attributes:
        instance: The cached instance, if already built.
        populated: Whether ``instance`` holds the built value.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    instance: Optional[Any] = Field(default=None, description="Cached shared instance.")
    populated: bool = Field(default=False, description="Whether the instance has been built.")

    @property
    def is_populated(self) -> bool:
        return self.populated

    def fill(self, instance: Any) -> None:
        self.instance = instance
        self.populated = True

    def reset(self) -> None:
        self.instance = None
        self.populated = False
