from enum import Enum


class TypeKind(str, Enum):
    """Describes how a class can be provisioned.

    Attributes:
        CONCRETE: Regular class that can be instantiated directly.
        ABSTRACT: Class with unimplemented abstract methods.
        INTERFACE: ``typing.Protocol`` class, never instantiated.
    """

    CONCRETE = "concrete"
    ABSTRACT = "abstract"
    INTERFACE = "interface"

    def __str__(self) -> str:
        return self.value
