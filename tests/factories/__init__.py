"""Sample domain types used as audit targets in tests."""

from tests.factories.pets import (
    Kennel,
    Pet,
    PetWithAliasedProperty,
    PetWithProperty,
    SlottedPet,
    TaggedPet,
)

__all__ = [
    "Kennel",
    "Pet",
    "PetWithAliasedProperty",
    "PetWithProperty",
    "SlottedPet",
    "TaggedPet",
]
