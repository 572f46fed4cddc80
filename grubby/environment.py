from typing import Any, Dict, Optional, Set

from grubby.ast import FuncDecl
from grubby.errors import GrubbyError
from grubby.types import ErrorVal, check_value, type_tag


class Environment:
    """A variable scope: values, their type tags and which names are mutable.

    Blocks never share an environment with their enclosing scope. They run
    against a :meth:`snapshot`, so declarations made inside a block do not
    leak out of it.
    """
    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.types: Dict[str, str] = {}
        self.mutable: Set[str] = set()
        # names declared inside this snapshot rather than copied into it
        self.local_names: Set[str] = set()

    def snapshot(self) -> 'Environment':
        env = Environment()
        env.values = dict(self.values)
        env.types = dict(self.types)
        env.mutable = set(self.mutable)
        env.local_names = set(self.local_names)
        return env

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def get(self, name: str) -> Any:
        return self.values[name]

    def declare(self, name: str, type_name: Optional[str], value: Any, is_mutable: bool, local: bool = False):
        try:
            check_value(value, type_name)
        except TypeError as e:
            raise GrubbyError(ErrorVal('TypeError', f"type mismatch declaring '{name}': {e}"))
        self.values[name] = value
        self.types[name] = type_name or type_tag(value)
        if is_mutable:
            self.mutable.add(name)
        else:
            self.mutable.discard(name)
        if local:
            self.local_names.add(name)

    def check_assign(self, name: str, value: Any):
        if name not in self.mutable:
            raise GrubbyError(ErrorVal('ImmutableError', f"cannot reassign immutable variable '{name}'"))
        try:
            check_value(value, self.types.get(name))
        except TypeError as e:
            raise GrubbyError(ErrorVal('TypeError', f"type mismatch assigning '{name}': {e}"))

    def set(self, name: str, value: Any):
        self.check_assign(name, value)
        self.values[name] = value

    def check_bind(self, name: str):
        if name in self.values and name not in self.mutable:
            raise GrubbyError(ErrorVal('ImmutableError', f"cannot use immutable variable '{name}' as a loop variable"))

    def bind(self, name: str, value: Any):
        """Bind a loop variable: the value replaces both the old value and its type tag."""
        self.check_bind(name)
        self.values[name] = value
        self.types[name] = type_tag(value)
        self.mutable.add(name)


class ExecutionState:
    """Long-lived state of one program run.

    Holds the global environment, deferred declarations (name to required
    type), the function table and the names of modules already imported. A
    name is either deferred or a normal global, never both.
    """
    def __init__(self):
        self.globals = Environment()
        self.deferred: Dict[str, str] = {}
        self.functions: Dict[str, FuncDecl] = {}
        self.imported: Set[str] = set()

    def declare_global(self, name: str, type_name: Optional[str], value: Any, is_mutable: bool):
        self.globals.declare(name, type_name, value, is_mutable)
        self.deferred.pop(name, None)

    def declare_deferred(self, name: str, type_name: str):
        self.globals.values.pop(name, None)
        self.globals.types.pop(name, None)
        self.globals.mutable.discard(name)
        self.deferred[name] = type_name

    def initialize_deferred(self, name: str, value: Any):
        required = self.deferred[name]
        try:
            check_value(value, required)
        except TypeError as e:
            raise GrubbyError(ErrorVal('TypeError', f"type mismatch initializing deferred '{name}': {e}"))
        del self.deferred[name]
        self.globals.declare(name, required, value, is_mutable=True)

    def assign_global(self, name: str, value: Any):
        if name in self.deferred:
            self.initialize_deferred(name, value)
            return
        if name not in self.globals:
            raise GrubbyError(ErrorVal('NameError', f"cannot assign to '{name}': variable was never declared"))
        self.globals.set(name, value)

    def bind_loop_variable(self, name: str, value: Any):
        if name in self.deferred:
            raise GrubbyError(ErrorVal('DeferredError', f"cannot use deferred variable '{name}' as a loop variable"))
        self.globals.bind(name, value)
