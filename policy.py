from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Iterator, Optional, Union


class Policy:
    """
    Deterministic policy: a mapping State -> Action.

    Terminal states never have an entry.  The policy is mutable while a
    training run owns it; `freeze()` turns it into a read-only artifact
    that can be handed to a player or written to disk.
    """

    def __init__(self, actions: Optional[Dict[Hashable, Hashable]] = None):
        self._actions: Dict[Hashable, Hashable] = dict(actions or {})
        self._frozen = False

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._actions)

    def __contains__(self, state: Hashable) -> bool:
        return state in self._actions

    def __getitem__(self, state: Hashable) -> Hashable:
        return self._actions[state]

    def __setitem__(self, state: Hashable, action: Hashable) -> None:
        if self._frozen:
            raise TypeError("policy is frozen; use copy() to get a mutable one")
        self._actions[state] = action

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return self._actions == other._actions

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "mutable"
        return f"Policy({len(self._actions)} states, {state})"

    def get(self, state: Hashable, default: Any = None) -> Any:
        return self._actions.get(state, default)

    def items(self):
        return self._actions.items()

    def to_dict(self) -> Dict[Hashable, Hashable]:
        return dict(self._actions)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> 'Policy':
        """Make this policy immutable and return it."""
        self._frozen = True
        return self

    def copy(self) -> 'Policy':
        """Mutable copy (whatever the frozen state of self)."""
        return Policy(self._actions)

    # ------------------------------------------------------------------
    # Persistence: one "<state key>\t<action key>" record per line
    # ------------------------------------------------------------------
    def save(self, path: Union[str, Path],
             encode_state: Callable[[Hashable], str] = str,
             encode_action: Callable[[Hashable], str] = str,
             header: Optional[Dict[str, Any]] = None) -> None:
        """
        Write the policy to `path`.

        Args:
            path: Target file
            encode_state: Canonical string key of a state (must not contain tabs/newlines)
            encode_action: Canonical string key of an action
            header: Optional metadata written as "# key=value" comment lines
        """
        lines = [f"# {k}={v}" for k, v in (header or {}).items()]
        for state, action in self._actions.items():
            lines.append(f"{encode_state(state)}\t{encode_action(action)}")
        Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")

    @classmethod
    def load(cls, path: Union[str, Path],
             decode_state: Callable[[str], Hashable] = str,
             decode_action: Callable[[str], Hashable] = str) -> 'Policy':
        """Read a policy written by `save`. The result is frozen."""
        policy = cls()
        for lineno, line in enumerate(Path(path).read_text(encoding="utf-8").splitlines(), 1):
            if not line.strip() or line.startswith("#"):
                continue
            parts = line.split("\t")
            if len(parts) != 2:
                raise ValueError(f"{path}:{lineno}: expected '<state>\\t<action>', got {line!r}")
            policy[decode_state(parts[0])] = decode_action(parts[1])
        return policy.freeze()

    @staticmethod
    def read_header(path: Union[str, Path]) -> Dict[str, str]:
        """Return the "# key=value" metadata of a saved policy file."""
        header: Dict[str, str] = {}
        for line in Path(path).read_text(encoding="utf-8").splitlines():
            if not line.startswith("#"):
                break
            key, _, value = line[1:].strip().partition("=")
            header[key] = value
        return header
