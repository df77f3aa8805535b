"""Core data models shared across repolens components."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

RELATION_KINDS = ("compositions", "aggregations", "associations", "dependencies")

# PlantUML arrow per relation kind, highest precedence first.
ARROWS: Dict[str, str] = {
    "implements": "..|>",
    "extends": "--|>",
    "compositions": "*--",
    "aggregations": "o--",
    "associations": "-->",
    "dependencies": "..>",
}


@dataclass(frozen=True)
class RepoRef:
    """Location of a GitHub folder parsed from a URL."""

    owner: str
    repo: str
    ref: str
    path: str = ""
    is_blob: bool = False


@dataclass(frozen=True)
class SourceFile:
    """A downloaded source file and the class name derived from its path."""

    path: str
    content: str
    class_name: str


@dataclass(frozen=True)
class GridDatum:
    """Size and branching complexity for a single file."""

    path: str
    line_count: int
    complexity: int


@dataclass
class ParsedClass:
    """Structural facts extracted from one source file."""

    path: str
    class_name: str
    is_interface: bool = False
    is_abstract: bool = False
    parent: Optional[str] = None
    implements: List[str] = field(default_factory=list)
    compositions: List[str] = field(default_factory=list)
    aggregations: List[str] = field(default_factory=list)
    associations: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    incoming_count: int = 0

    def all_outgoing(self) -> List[str]:
        """Return the ordered union of every outgoing target, self excluded."""
        candidates: List[str] = list(self.implements)
        if self.parent is not None:
            candidates.append(self.parent)
        for kind in RELATION_KINDS:
            candidates.extend(getattr(self, kind))
        ordered = dict.fromkeys(name for name in candidates if name != self.class_name)
        return list(ordered)


@dataclass(frozen=True)
class DiaDatum:
    """Abstractness, instability and distance for a single file."""

    path: str
    abstractness: float
    instability: float
    distance: float
    incoming: int
    outgoing: int

    @property
    def simple_name(self) -> str:
        name = self.path.replace("\\", "/").rsplit("/", 1)[-1]
        stem, dot, _ = name.rpartition(".")
        return stem if dot else name


@dataclass(frozen=True)
class UmlDocument:
    """PlantUML class diagram text."""

    text: str

    def relation_count(self) -> int:
        tokens = tuple(f" {arrow} " for arrow in ARROWS.values())
        return sum(1 for line in self.text.splitlines() if any(token in line for token in tokens))


@dataclass(frozen=True)
class AnalysisResult:
    """Grid, DIA and UML datasets produced by one analysis run."""

    source: str
    grid: List[GridDatum]
    dia: List[DiaDatum]
    uml: UmlDocument

    @property
    def max_line_count(self) -> int:
        return max((datum.line_count for datum in self.grid), default=0)

    @property
    def average_instability(self) -> float:
        if not self.dia:
            return 0.0
        return sum(datum.instability for datum in self.dia) / len(self.dia)

    @property
    def average_distance(self) -> float:
        if not self.dia:
            return 0.0
        return sum(datum.distance for datum in self.dia) / len(self.dia)

    def summary(self) -> str:
        """Return the one-line status summary shown after a successful run."""
        if not self.dia:
            return f"{len(self.grid)} files analyzed."
        return (
            f"{len(self.grid)} files analyzed | "
            f"Avg Instability: {self.average_instability:.2f} | "
            f"Avg Distance: {self.average_distance:.2f}"
        )

    def for_folder(self, folder: Optional[str]) -> "AnalysisResult":
        """Return a view restricted to files beneath ``folder``.

        The UML document always describes the whole run and is shared as is.
        """
        prefix = _normalise_folder(folder)
        if prefix is None:
            return self
        return AnalysisResult(
            source=self.source,
            grid=[datum for datum in self.grid if _in_folder(datum.path, prefix)],
            dia=[datum for datum in self.dia if _in_folder(datum.path, prefix)],
            uml=self.uml,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "grid": [asdict(datum) for datum in self.grid],
            "dia": [asdict(datum) for datum in self.dia],
            "uml": self.uml.text,
        }


def _normalise_folder(folder: Optional[str]) -> Optional[str]:
    if folder is None:
        return None
    trimmed = folder.strip().replace("\\", "/").strip("/")
    return trimmed or None


def _in_folder(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(f"{prefix}/")
