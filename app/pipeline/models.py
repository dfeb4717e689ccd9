from dataclasses import dataclass, field


@dataclass(frozen=True)
class ClassificationResult:
    """Tags and description extracted from a reading guide."""

    tags: list[str] = field(default_factory=list)
    description: str = ""
