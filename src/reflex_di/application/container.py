import threading
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Tuple

import structlog

from reflex_di.application.circular_detector import CircularDependencyDetector
from reflex_di.application.introspector import ReflectionIntrospector
from reflex_di.application.shared_instances import SharedInstanceManager
from reflex_di.domain import (
    BadImplementationError,
    ClassDescriptor,
    DIException,
    IContainer,
    InjectionDefinition,
    InvalidArgumentError,
    ITypeIntrospector,
    ParameterDescriptor,
    RegistrationNotFoundError,
    TypeRef,
    UnresolvableTypeError,
)

logger = structlog.get_logger(__name__)

_EMPTY_DEFINITION = InjectionDefinition()


class DIContainer(IContainer):
    """Reflection based dependency injection container.

    Builds object graphs by walking constructor signatures. Each parameter is
    provided, in order of precedence, by the effective injection definition
    (a type to provision or a ``:``-prefixed raw value), by auto-wiring its
    declared concrete type, by the implementation bound to its declared
    abstract type, or by its default value.

    Attributes:
        _introspector: Source of cached constructor metadata.
        _definitions: Injection definitions by canonical type name.
        _implementations: Concrete types bound to abstract types, by canonical name.
        _shared: Shared instance slots.
        _circular_detector: Tracks the types currently being built.
    """

    def __init__(
        self,
        introspector: Optional[ITypeIntrospector] = None,
        *,
        detect_cycles: bool = True,
        strict_untyped: bool = False,
    ) -> None:
        """Initialize the container with empty tables.

        Args:
            introspector: Metadata source; a new ``ReflectionIntrospector`` by default.
            detect_cycles: Fail with ``CyclicDependencyError`` when a type
                requires itself, instead of recursing until ``RecursionError``.
            strict_untyped: Fail on untyped parameters without a default instead
                of passing ``None``.
        """
        self._introspector: ITypeIntrospector = introspector or ReflectionIntrospector()
        self._definitions: Dict[str, InjectionDefinition] = {}
        self._implementations: Dict[str, TypeRef] = {}
        self._shared = SharedInstanceManager()
        self._circular_detector = CircularDependencyDetector()
        self._detect_cycles = detect_cycles
        self._strict_untyped = strict_untyped
        self._lock = threading.RLock()

    @property
    def introspector(self) -> ITypeIntrospector:
        return self._introspector

    def make(self, type_ref: TypeRef, custom_definition: Optional[Mapping[str, Any]] = None) -> Any:
        """Build an instance of ``type_ref`` with all constructor dependencies injected.

        Args:
            type_ref: Class object or type name.
            custom_definition: Definition used for this call instead of the
                registered one. Only applies to ``type_ref`` itself.

        Returns:
            The shared instance when one is cached, otherwise a new instance.

        Raises:
            TypeNotFoundError: If the type or a declared dependency cannot be located.
            InvalidDefinitionError: If ``custom_definition`` is invalid.
            UnresolvableTypeError: If a dependency cannot be provided.
            BadImplementationError: If a bound implementation does not satisfy its abstract type.
            CyclicDependencyError: If a type requires itself.

        Example:
            >>> container.make(Greeter, {":message": "yo"}).message
            'yo'
        """
        key = self._key(type_ref)
        with self._lock:
            if custom_definition is not None:
                definition = InjectionDefinition.from_mapping(custom_definition)
            else:
                definition = self._definitions.get(key, _EMPTY_DEFINITION)

            return self._shared.get_or_create(key, lambda: self._build(type_ref, definition))

    def define(self, type_ref: TypeRef, definition: Mapping[str, Any]) -> None:
        """Store the injection definition for a type, replacing any previous one.

        Args:
            type_ref: Class object or type name.
            definition: Mapping of parameter names to type names, or of
                ``:``-prefixed parameter names to raw values.

        Raises:
            InvalidDefinitionError: If a bare key maps to something other than a
                type. The previous definition is kept.

        Example:
            >>> container.define("App", {"mailer": "SmtpMailer", ":retries": 3})
        """
        validated = InjectionDefinition.from_mapping(definition)
        key = self._key(type_ref)
        with self._lock:
            self._definitions[key] = validated
        logger.debug("definition_stored", type=key, parameters=list(validated.entries))

    def define_all(self, definitions: Any) -> int:
        count = 0
        for type_ref, definition in self._pairs(definitions, "define_all"):
            self.define(type_ref, definition)
            count += 1
        return count

    def get_definition(self, type_ref: TypeRef) -> Dict[str, Any]:
        key = self._key(type_ref)
        with self._lock:
            if key not in self._definitions:
                raise RegistrationNotFoundError(f"No definition specified for {self._label(type_ref)}")
            return self._definitions[key].to_dict()

    def is_defined(self, type_ref: TypeRef) -> bool:
        return self._key(type_ref) in self._definitions

    def clear_definition(self, type_ref: TypeRef) -> None:
        with self._lock:
            self._definitions.pop(self._key(type_ref), None)

    def clear_all_definitions(self) -> None:
        with self._lock:
            self._definitions.clear()

    def implement(self, abstract: TypeRef, concrete: TypeRef) -> None:
        """Bind an abstract or interface type to the concrete type used in its place.

        The binding is verified when it is first used, not here.
        """
        if not isinstance(concrete, (str, type)):
            raise InvalidArgumentError(
                f"implement() requires a class or type name as implementation; {type(concrete).__name__} specified"
            )
        key = self._key(abstract)
        with self._lock:
            self._implementations[key] = concrete
        logger.debug("implementation_bound", abstract=key, concrete=self._label(concrete))

    def implement_all(self, implementations: Any) -> int:
        count = 0
        for abstract, concrete in self._pairs(implementations, "implement_all"):
            self.implement(abstract, concrete)
            count += 1
        return count

    def get_implementation(self, abstract: TypeRef) -> TypeRef:
        key = self._key(abstract)
        with self._lock:
            if key not in self._implementations:
                raise RegistrationNotFoundError(
                    f"The non-concrete type {self._label(abstract)} has no assigned implementation"
                )
            return self._implementations[key]

    def is_implemented(self, abstract: TypeRef) -> bool:
        return self._key(abstract) in self._implementations

    def clear_implementation(self, abstract: TypeRef) -> None:
        with self._lock:
            self._implementations.pop(self._key(abstract), None)

    def clear_all_implementations(self) -> None:
        with self._lock:
            self._implementations.clear()

    def share(self, target: Any) -> None:
        """Share a type or an existing instance.

        A class or type name is marked shared and built on its next resolution.
        Any other object becomes the shared instance of its runtime type
        immediately.

        Raises:
            InvalidArgumentError: If ``target`` is ``None``.
        """
        if target is None:
            raise InvalidArgumentError("share() requires a class, type name or instance; NoneType specified")

        with self._lock:
            if isinstance(target, (str, type)):
                self._shared.mark(self._key(target))
            else:
                self._shared.store(self._key(type(target)), target)

    def share_all(self, targets: Iterable) -> None:
        if isinstance(targets, (str, bytes)) or not isinstance(targets, Iterable):
            raise InvalidArgumentError(
                f"share_all() requires an iterable of classes, type names or instances; "
                f"{type(targets).__name__} specified"
            )
        for target in list(targets):
            self.share(target)

    def is_shared(self, type_ref: TypeRef) -> bool:
        return self._shared.is_shared(self._key(type_ref))

    def refresh(self, type_ref: TypeRef) -> None:
        with self._lock:
            self._shared.refresh(self._key(type_ref))

    def unshare(self, type_ref: TypeRef) -> None:
        with self._lock:
            self._shared.unshare(self._key(type_ref))

    def clear(self) -> None:
        """Clear every definition, binding, shared instance and cached descriptor.

        Useful for testing or resetting the container state.
        """
        with self._lock:
            self._definitions.clear()
            self._implementations.clear()
            self._shared.clear()
            self._introspector.clear()
            self._circular_detector.clear()

    def create_scope(self, fresh: Iterable[TypeRef] = ()) -> "DIContainer":
        """Create a child container with private instances of the ``fresh`` types.

        The child starts with copies of this container's definitions and
        bindings. Every other shared slot is common to both containers, so
        application-wide instances are still built once. Each type in
        ``fresh`` is shared only within the child.

        Returns:
            New container using the same introspector.

        Example:
            >>> scope = container.create_scope([RequestContext])
            >>> scope.make(RequestContext) is scope.make(RequestContext)
            True
            >>> scope.make(RequestContext) is container.make(RequestContext)
            False
        """
        scope = DIContainer(
            self._introspector,
            detect_cycles=self._detect_cycles,
            strict_untyped=self._strict_untyped,
        )
        with self._lock:
            fresh_keys = [self._key(type_ref) for type_ref in fresh]
            scope._definitions = dict(self._definitions)
            scope._implementations = dict(self._implementations)
            scope._shared = self._shared.scoped(fresh_keys)
        # Slots are shared with this container, so are builds into them.
        scope._lock = self._lock
        return scope

    def _key(self, type_ref: TypeRef) -> str:
        """Return the canonical key for ``type_ref``.

        Entries stored under a name that has since become an alias of the
        canonical name are moved to the canonical key. An entry already under
        the canonical key is kept.
        """
        key = self._introspector.normalize(type_ref)
        with self._lock:
            for alias in self._introspector.aliases_of(key):
                for table in (self._definitions, self._implementations):
                    if alias in table:
                        table.setdefault(key, table.pop(alias))
                self._shared.rekey(alias, key)
        return key

    def _build(self, type_ref: TypeRef, definition: InjectionDefinition) -> Any:
        descriptor = self._introspector.describe_class(type_ref)

        if self._detect_cycles:
            self._circular_detector.push(descriptor.name, descriptor.display_name)
        try:
            if not descriptor.is_instantiable:
                return self._build_abstract(descriptor)

            parameters = self._introspector.describe_constructor(descriptor.name)
            if not parameters:
                return self._instantiate(descriptor, (), {})

            args, kwargs = self._build_arguments(descriptor, parameters, definition)
            return self._instantiate(descriptor, tuple(args), kwargs)
        finally:
            if self._detect_cycles:
                self._circular_detector.pop()

    def _build_arguments(
        self,
        descriptor: ClassDescriptor,
        parameters: Tuple[ParameterDescriptor, ...],
        definition: InjectionDefinition,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for parameter in parameters:
            try:
                value = self._resolve_parameter(parameter, definition)
            except DIException as e:
                raise e.add_context(f"{descriptor.display_name}.__init__({parameter.name})")

            if parameter.keyword_only:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return args, kwargs

    def _resolve_parameter(self, parameter: ParameterDescriptor, definition: InjectionDefinition) -> Any:
        if definition.has_type_for(parameter.name):
            return self.make(definition.type_for(parameter.name))

        if definition.has_raw_for(parameter.name):
            return definition.raw_for(parameter.name)

        declared = self._introspector.declared_type(parameter)
        if declared is not None:
            declared_descriptor = self._introspector.describe_class(declared)
            if declared_descriptor.is_instantiable:
                return self.make(declared)
            shared_key = self._key(declared_descriptor.name)
            if self._shared.is_populated(shared_key):
                return self._shared.get(shared_key)
            return self._build_abstract_parameter(declared_descriptor, parameter)

        if parameter.has_default:
            return parameter.default

        if self._strict_untyped:
            raise UnresolvableTypeError(
                None,
                "no declared type, default value or injection definition",
                parameter=parameter.name,
                position=parameter.position,
            )
        return None

    def _build_abstract_parameter(self, descriptor: ClassDescriptor, parameter: ParameterDescriptor) -> Any:
        if not self.is_implemented(descriptor.name):
            raise UnresolvableTypeError(
                descriptor.display_name,
                f"injection definition or implementation required for non-concrete {descriptor.kind} type",
                parameter=parameter.name,
                position=parameter.position,
            )
        return self._build_implementation(descriptor)

    def _build_abstract(self, descriptor: ClassDescriptor) -> Any:
        if self.is_implemented(descriptor.name):
            return self._build_implementation(descriptor)
        raise UnresolvableTypeError(
            descriptor.display_name,
            f"cannot instantiate {descriptor.kind} {descriptor.display_name} without an injection "
            "definition or implementation",
        )

    def _build_implementation(self, abstract: ClassDescriptor) -> Any:
        concrete = self.get_implementation(abstract.name)
        instance = self.make(concrete)
        if not self._introspector.satisfies(instance, abstract.name):
            raise BadImplementationError(self._label(concrete), abstract.display_name)
        return instance

    def _instantiate(self, descriptor: ClassDescriptor, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        try:
            instance = descriptor.new_instance(args, kwargs)
        except DIException:
            raise
        except Exception as e:
            raise UnresolvableTypeError(descriptor.display_name, f"Failed to create instance: {e}") from e
        logger.debug("instance_built", type=descriptor.display_name)
        return instance

    @staticmethod
    def _label(type_ref: Any) -> str:
        return type_ref.__name__ if isinstance(type_ref, type) else str(type_ref)

    @staticmethod
    def _pairs(items: Any, operation: str) -> List[Tuple[Any, Any]]:
        """Normalize bulk input into (key, value) pairs before anything is registered."""
        if isinstance(items, Mapping):
            return list(items.items())
        if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
            raise InvalidArgumentError(
                f"{operation}() expects a mapping or an iterable of pairs; {type(items).__name__} specified"
            )

        pairs = []
        for item in items:
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise InvalidArgumentError(f"{operation}() expects (key, value) pairs; got {item!r}")
            pairs.append((item[0], item[1]))
        return pairs
