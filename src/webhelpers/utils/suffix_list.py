"""Public suffix list loading and one-time, thread-safe construction."""
import logging
import threading
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from webhelpers.config import settings

logger = logging.getLogger(__name__)

# Data file shipped inside the publicsuffixlist distribution
BUNDLED_PACKAGE = "publicsuffixlist"
BUNDLED_FILE = "public_suffix_list.dat"


@dataclass(frozen=True)
class SuffixList:
    """
    Immutable public suffix list.

    Rules are kept in source order in three partitions:
        - exact: literal suffixes ("com", "co.uk")
        - under: wildcard rules, stored without "*." ("*.ck" -> "ck")
        - excluded: exception rules, stored without "!" ("!www.ck" -> "www.ck")

    The matcher only sees ``entries``, the three partitions flattened
    into one de-duplicated ordered set.
    """
    exact: Tuple[str, ...] = ()
    under: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()
    entries: Tuple[str, ...] = field(init=False, repr=False)
    _lookup: frozenset = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        flattened = tuple(dict.fromkeys(self.exact + self.under + self.excluded))
        object.__setattr__(self, "entries", flattened)
        object.__setattr__(self, "_lookup", frozenset(flattened))

    def __contains__(self, suffix: str) -> bool:
        return suffix.lower() in self._lookup

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_rules(cls, lines: Iterable[str]) -> "SuffixList":
        """
        Build a suffix list from lines in public_suffix_list.dat format.

        Blank lines and "//" comments are skipped; only the text up to the
        first whitespace of a line is a rule.
        """
        exact, under, excluded = [], [], []

        for line in lines:
            line = line.strip()
            if not line or line.startswith("//"):
                continue

            rule = line.split()[0].lower()
            if rule.startswith("!"):
                excluded.append(rule[1:])
            elif rule.startswith("*."):
                under.append(rule[2:])
            else:
                exact.append(rule)

        return cls(exact=tuple(exact), under=tuple(under), excluded=tuple(excluded))


def load_bundled_rules() -> str:
    """Read the public suffix list bundled with publicsuffixlist."""
    return resources.files(BUNDLED_PACKAGE).joinpath(BUNDLED_FILE).read_text(encoding="utf-8")


def load_suffix_list(path: Optional[str] = None) -> SuffixList:
    """
    Load the suffix list from a local .dat file or the bundled copy.

    Args:
        path: Optional path to a public_suffix_list.dat style file
    """
    if path:
        text = Path(path).read_text(encoding="utf-8")
        source = path
    else:
        text = load_bundled_rules()
        source = f"{BUNDLED_PACKAGE}/{BUNDLED_FILE}"

    suffixes = SuffixList.from_rules(text.splitlines())
    logger.info(
        f"Built suffix list from {source}: {len(suffixes.exact)} exact, "
        f"{len(suffixes.under)} under, {len(suffixes.excluded)} excluded"
    )
    return suffixes


class LazySuffixList:
    """
    Lazily built, process-wide suffix list.

    The loader runs at most once. Callers arriving while the first build
    is in progress block on the lock and then see the finished list; once
    built, ``get`` returns without locking.
    """

    def __init__(self, loader: Optional[Callable[[], SuffixList]] = None):
        self._loader = loader or (lambda: load_suffix_list(settings.suffix_list_path))
        self._lock = threading.Lock()
        self._value: Optional[SuffixList] = None

    @property
    def is_built(self) -> bool:
        return self._value is not None

    def get(self) -> SuffixList:
        value = self._value
        if value is not None:
            return value

        with self._lock:
            if self._value is None:
                self._value = self._loader()
            return self._value


# Global suffix list shared by all matchers
suffix_list = LazySuffixList()
