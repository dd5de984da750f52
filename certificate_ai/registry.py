"""
Certificate type registry

Built once at startup and passed explicitly into the classifier and the
field extractor. Read-only after construction.
"""

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Any

from .errors import UnknownCertificateTypeError
from .schemas import BUILTIN_SCHEMAS, CertificateTypeSchema


UNKNOWN_TYPE = "UNKNOWN"


class CertificateRegistry:
    """Immutable mapping of type key -> CertificateTypeSchema"""

    __slots__ = ("_schemas",)

    def __init__(self, schemas: Iterable[CertificateTypeSchema]):
        by_key: Dict[str, CertificateTypeSchema] = {}
        for schema in schemas:
            if schema.type_key in by_key:
                raise ValueError(f"Duplicate certificate type: {schema.type_key}")
            by_key[schema.type_key] = schema
        if not by_key:
            raise ValueError("Registry needs at least one certificate type")
        object.__setattr__(self, "_schemas", MappingProxyType(by_key))

    def __setattr__(self, name, value):
        raise AttributeError("CertificateRegistry is read-only")

    def __contains__(self, type_key: object) -> bool:
        return type_key in self._schemas

    def __iter__(self) -> Iterator[CertificateTypeSchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    @property
    def type_keys(self) -> List[str]:
        return list(self._schemas.keys())

    @property
    def schemas(self) -> Mapping[str, CertificateTypeSchema]:
        return self._schemas

    def get(self, type_key: str) -> Optional[CertificateTypeSchema]:
        return self._schemas.get(type_key)

    def require(self, type_key: str) -> CertificateTypeSchema:
        """
        Look up a schema, failing loudly for unregistered keys

        Raises:
            UnknownCertificateTypeError: if the key is not registered
        """
        schema = self._schemas.get(type_key)
        if schema is None:
            raise UnknownCertificateTypeError(type_key)
        return schema

    def supported_types(self) -> List[Dict[str, Any]]:
        """Summary of every registered type, as shown to the upload UI"""
        return [
            {
                "type": schema.type_key,
                "name": schema.display_name,
                "table": schema.storage_table,
                "sectionCode": schema.section_code,
                "description": schema.description,
            }
            for schema in self
        ]


_DEFAULT_REGISTRY: Optional[CertificateRegistry] = None


def default_registry() -> CertificateRegistry:
    """Registry of the built-in certificate types (created on first use)"""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = CertificateRegistry(BUILTIN_SCHEMAS)
    return _DEFAULT_REGISTRY


def supported_types(registry: Optional[CertificateRegistry] = None) -> List[Dict[str, Any]]:
    return (registry or default_registry()).supported_types()
