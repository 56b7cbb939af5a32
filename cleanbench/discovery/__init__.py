"""Fixture and contender discovery.

Fixtures are named input values; contenders are named single-argument
operations under comparison. Both are supplied to a session from outside and
outlive it.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from cleanbench.benchmark.exceptions import ConfigurationError, FixtureLoadError
from cleanbench.utils.logger import get_logger

logger = get_logger(__name__)

# Repository root (holds the bundled samples/ directory)
DEFAULT_REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SAMPLES_DIR = DEFAULT_REPO_ROOT / "samples"


@dataclass(frozen=True)
class Fixture:
    """A named benchmark input.

    ``factory``, when given, is called once per iteration and must return an
    independent value; otherwise ``value`` is shared (and cloned per iteration
    for contenders that mutate their input).
    """

    id: str
    value: Any = None
    factory: Optional[Callable[[], Any]] = None

    def producer(self, clone: bool) -> Callable[[], Any]:
        """Return a zero-argument callable yielding the input for one iteration."""
        if self.factory is not None:
            return self.factory
        value = self.value
        if clone:
            return lambda: copy.deepcopy(value)
        return lambda: value


@dataclass(frozen=True)
class Contender:
    """A named implementation under comparison."""

    name: str
    operation: Callable[[Any], Any]
    mutates_input: bool = False
    description: str = ""


class ContenderRegistry:
    """Ordered collection of uniquely named contenders."""

    def __init__(self, contenders: Iterable[Contender] = ()):
        self._contenders: Dict[str, Contender] = {}
        for contender in contenders:
            self.add(contender)

    def add(self, contender: Contender) -> Contender:
        if contender.name in self._contenders:
            raise ConfigurationError(
                f"Contender '{contender.name}' is already registered",
                config_key="contenders",
                config_value=contender.name,
                reason="contender names must be unique",
            )
        self._contenders[contender.name] = contender
        return contender

    def register(
        self,
        name: Optional[str] = None,
        *,
        mutates_input: bool = False,
        description: str = "",
    ) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
        """Decorator form of :meth:`add`; the function is returned unchanged."""
        def decorator(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
            doc_lines = (fn.__doc__ or "").strip().splitlines()
            self.add(Contender(
                name=name or fn.__name__,
                operation=fn,
                mutates_input=mutates_input,
                description=description or (doc_lines[0] if doc_lines else ""),
            ))
            return fn
        return decorator

    def select(self, names: Optional[Sequence[str]] = None) -> List[Contender]:
        """Return contenders by name in the requested order (all when names is empty)."""
        if not names:
            return list(self._contenders.values())
        unknown = [n for n in names if n not in self._contenders]
        if unknown:
            raise ConfigurationError(
                f"Unknown contender(s): {', '.join(unknown)}. "
                f"Available: {', '.join(self._contenders)}",
                config_key="contenders",
                config_value=list(names),
                reason="not registered",
            )
        return [self._contenders[n] for n in dict.fromkeys(names)]

    def names(self) -> List[str]:
        return list(self._contenders)

    def __iter__(self) -> Iterator[Contender]:
        return iter(list(self._contenders.values()))

    def __len__(self) -> int:
        return len(self._contenders)

    def __contains__(self, name: object) -> bool:
        return name in self._contenders


def load_fixture_file(path: Path) -> Fixture:
    """Load one JSON file as a fixture whose id is the file name."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            value = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise FixtureLoadError(
            f"Failed to load fixture {path}: {exc}",
            path=str(path),
            reason=str(exc),
        ) from exc
    return Fixture(id=path.name, value=value)


def load_fixture_dir(directory: Path, pattern: str = "*.json") -> List[Fixture]:
    """Load every matching file in ``directory``, sorted by file name."""
    directory = Path(directory).expanduser()
    if not directory.is_dir():
        raise FixtureLoadError(
            f"Fixture directory not found: {directory}",
            path=str(directory),
            reason="not a directory",
        )
    fixtures = [load_fixture_file(p) for p in sorted(directory.glob(pattern)) if p.is_file()]
    logger.debug("Loaded %d fixture(s) from %s", len(fixtures), directory)
    return fixtures
