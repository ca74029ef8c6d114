from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .project import Directory


LogFn = Callable[[str], None]

UNRESOLVED_TYPE = "null"

LANG_JAVA = "java"
LANG_KOTLIN = "kotlin"


class RestGenError(RuntimeError):
    pass


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type_text: str

    @property
    def unresolved(self) -> bool:
        return self.type_text == UNRESOLVED_TYPE


@dataclass(frozen=True)
class ClassDescriptor:
    name: str
    qualified_name: str
    fields: List[FieldSpec] = field(default_factory=list)
    language: str = LANG_JAVA
    source_path: Optional[Path] = None

    @property
    def package(self) -> str:
        if "." not in self.qualified_name:
            return ""
        return self.qualified_name.rsplit(".", 1)[0]


@dataclass(frozen=True)
class GenerationContext:
    base_package: str
    base_directory: Optional["Directory"]
    api_prefix: str = "/api"


@dataclass(frozen=True)
class GeneratedArtifact:
    relative_path: str
    file_name: str
    package: str
    content: str


@dataclass(frozen=True)
class Message:
    level: str  # error | warn | info
    title: str
    text: str
