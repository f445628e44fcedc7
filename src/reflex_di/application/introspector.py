"""Application layer - Reflection based type introspection."""

import enum
import importlib
import inspect
import threading
import types
from typing import Any, Dict, Iterable, Optional, Set, Tuple, Type, Union, get_args, get_origin, get_type_hints

import structlog

from reflex_di.domain import (
    ClassDescriptor,
    InvalidArgumentError,
    ITypeIntrospector,
    ParameterDescriptor,
    TypeKind,
    TypeNotFoundError,
    TypeRef,
)

logger = structlog.get_logger(__name__)

_UNION_TYPES = (Union, getattr(types, "UnionType", Union))


def qualified_name(cls: Type) -> str:
    """Return the dotted import path of a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


class ReflectionIntrospector(ITypeIntrospector):
    """Discovers constructor shapes with ``inspect`` and caches them.

    Every class the introspector sees is stored under its canonical name (the
    lower-cased dotted path) and becomes reachable through its short
    ``__name__`` as well, so configuration can refer to ``"Greeter"`` once the
    class has been registered or reflected.

    Attributes:
        _classes: Class descriptors by canonical name.
        _aliases: Lower-cased alternative names mapped to canonical names.
        _names_by_class: Reverse of ``_aliases``.
        _constructors: Constructor parameters by canonical name (``None`` when
            the class declares no constructor).
        _declared_types: Resolved parameter types by (owner, parameter name).
        _type_hints: Evaluated ``__init__`` annotations by canonical name.
    """

    def __init__(self) -> None:
        """Initialize the introspector with empty caches."""
        self._lock = threading.RLock()
        self._classes: Dict[str, ClassDescriptor] = {}
        self._aliases: Dict[str, str] = {}
        self._names_by_class: Dict[str, Set[str]] = {}
        self._constructors: Dict[str, Optional[Tuple[ParameterDescriptor, ...]]] = {}
        self._declared_types: Dict[Tuple[str, str], Optional[str]] = {}
        self._type_hints: Dict[str, Dict[str, Any]] = {}

    def normalize(self, type_ref: TypeRef) -> str:
        if isinstance(type_ref, type):
            with self._lock:
                return self._cache_class(type_ref).name
        if isinstance(type_ref, str):
            lowered = type_ref.strip().replace(":", ".").lower()
            with self._lock:
                if lowered in self._aliases or lowered in self._classes:
                    return self._aliases.get(lowered, lowered)
            if "." not in lowered:
                return lowered

            # A dotted path may be a re-export; key it by where the class is defined.
            try:
                cls = self._locate(type_ref)
            except TypeNotFoundError:
                return lowered
            with self._lock:
                descriptor = self._cache_class(cls)
                self._add_alias(lowered, descriptor.name)
                return descriptor.name
        raise InvalidArgumentError(f"Expected a class or type name; {type(type_ref).__name__} specified")

    def aliases_of(self, canonical: str) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._names_by_class.get(canonical, ()))

    def register(self, cls: Type, *aliases: str) -> str:
        """Cache a class and make it reachable by its short name and any extra aliases.

        Args:
            cls: The class to register.
            *aliases: Additional names the class should answer to.

        Returns:
            The canonical name of the class.

        Example:
            >>> introspector.register(SmtpMailer, "Mailer.Default")
            'app.mail.smtpmailer'
        """
        if not inspect.isclass(cls):
            raise InvalidArgumentError(f"Only classes can be registered; {type(cls).__name__} specified")
        with self._lock:
            descriptor = self._cache_class(cls)
            self._add_alias(cls.__name__.lower(), descriptor.name, replace=True)
            for alias in aliases:
                self._add_alias(alias.strip().lower(), descriptor.name, replace=True)
        return descriptor.name

    def register_all(self, classes: Iterable[Type]) -> int:
        """Register several classes and return how many were registered."""
        count = 0
        for cls in classes:
            self.register(cls)
            count += 1
        return count

    def describe_class(self, type_ref: TypeRef) -> ClassDescriptor:
        if isinstance(type_ref, type):
            with self._lock:
                return self._cache_class(type_ref)

        key = self.normalize(type_ref)
        with self._lock:
            if key in self._classes:
                return self._classes[key]

        cls = self._locate(type_ref)
        with self._lock:
            descriptor = self._cache_class(cls)
            self._add_alias(key, descriptor.name)
        return descriptor

    def describe_constructor(self, type_ref: TypeRef) -> Optional[Tuple[ParameterDescriptor, ...]]:
        descriptor = self.describe_class(type_ref)
        with self._lock:
            if descriptor.name in self._constructors:
                return self._constructors[descriptor.name]

            parameters = self._reflect_constructor(descriptor)
            self._constructors[descriptor.name] = parameters
            return parameters

    def declared_type(self, parameter: ParameterDescriptor) -> Optional[str]:
        cache_key = (parameter.owner, parameter.name)
        with self._lock:
            if cache_key in self._declared_types:
                return self._declared_types[cache_key]

            annotation = parameter.annotation
            if isinstance(annotation, str):
                annotation = self._evaluated_hints(parameter.owner).get(parameter.name, annotation)
            annotation = self._unwrap_optional(annotation)

            declared: Optional[str] = None
            if isinstance(annotation, str):
                # Unevaluated forward reference: usable only if the name is already known.
                candidate = self.normalize(annotation)
                if candidate in self._classes:
                    declared = candidate
            elif inspect.isclass(annotation) and not self._is_value_type(annotation):
                declared = self._cache_class(annotation).name

            self._declared_types[cache_key] = declared
            return declared

    def satisfies(self, instance: Any, type_ref: TypeRef) -> bool:
        target = self.describe_class(type_ref)
        if target.python_type is None:
            return target.name in self.describe_class(type(instance)).supertypes
        try:
            return isinstance(instance, target.python_type)
        except TypeError:
            # Protocols that are not runtime checkable only support nominal checks.
            return target.python_type in type(instance).__mro__

    def clear(self) -> None:
        with self._lock:
            self._classes.clear()
            self._aliases.clear()
            self._names_by_class.clear()
            self._constructors.clear()
            self._declared_types.clear()
            self._type_hints.clear()

    def _add_alias(self, alias: str, canonical: str, replace: bool = False) -> None:
        if alias == canonical:
            return
        previous = self._aliases.get(alias)
        if previous is not None:
            if not replace or previous == canonical:
                return
            self._names_by_class[previous].discard(alias)
        self._aliases[alias] = canonical
        self._names_by_class.setdefault(canonical, set()).add(alias)

    def _cache_class(self, cls: Type) -> ClassDescriptor:
        """Describe ``cls`` and store it, returning the cached descriptor when present."""
        key = qualified_name(cls).lower()
        if key in self._classes:
            return self._classes[key]

        if getattr(cls, "_is_protocol", False):
            kind = TypeKind.INTERFACE
        elif inspect.isabstract(cls):
            kind = TypeKind.ABSTRACT
        else:
            kind = TypeKind.CONCRETE

        descriptor = ClassDescriptor(
            name=key,
            display_name=cls.__name__,
            python_type=cls,
            kind=kind,
            supertypes=frozenset(qualified_name(base).lower() for base in cls.__mro__),
        )
        self._classes[key] = descriptor
        self._add_alias(cls.__name__.lower(), key)
        logger.debug("class_reflected", type=descriptor.display_name, kind=str(kind))
        return descriptor

    def _locate(self, type_name: str) -> Type:
        """Import a class from a ``package.module.Class`` or ``package.module:Class`` path."""
        parts = type_name.strip().replace(":", ".").split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target: Any = importlib.import_module(module_name)
            except ImportError:
                continue

            try:
                for attribute in parts[split:]:
                    target = getattr(target, attribute)
            except AttributeError as e:
                raise TypeNotFoundError(type_name, f"module {module_name} has no attribute {e.name}") from e

            if not inspect.isclass(target):
                raise TypeNotFoundError(type_name, "the name does not refer to a class")
            return target

        raise TypeNotFoundError(type_name, "no registered class or importable module matches")

    def _reflect_constructor(self, descriptor: ClassDescriptor) -> Optional[Tuple[ParameterDescriptor, ...]]:
        cls = descriptor.python_type
        if cls is None or descriptor.kind == TypeKind.INTERFACE or cls.__init__ is object.__init__:
            return None

        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            return None

        parameters = []
        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            parameters.append(
                ParameterDescriptor(
                    owner=descriptor.name,
                    position=len(parameters) + 1,
                    name=param.name,
                    annotation=None if param.annotation is inspect.Parameter.empty else param.annotation,
                    has_default=param.default is not inspect.Parameter.empty,
                    default=None if param.default is inspect.Parameter.empty else param.default,
                    keyword_only=param.kind == inspect.Parameter.KEYWORD_ONLY,
                )
            )
        return tuple(parameters)

    def _evaluated_hints(self, owner: str) -> Dict[str, Any]:
        if owner not in self._type_hints:
            descriptor = self._classes.get(owner)
            hints: Dict[str, Any] = {}
            if descriptor is not None and descriptor.python_type is not None:
                try:
                    hints = get_type_hints(descriptor.python_type.__init__)
                except Exception:  # unresolvable forward references leave the raw strings
                    hints = {}
            self._type_hints[owner] = hints
        return self._type_hints[owner]

    @staticmethod
    def _is_value_type(annotation: Type) -> bool:
        """Annotations that describe plain values rather than injectable services."""
        if annotation.__module__ == "builtins" or annotation is Any:
            return True
        return issubclass(annotation, enum.Enum)

    @staticmethod
    def _unwrap_optional(annotation: Any) -> Any:
        if get_origin(annotation) in _UNION_TYPES:
            members = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(members) == 1:
                return members[0]
        return annotation
