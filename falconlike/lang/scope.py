"""Scope for the Falcon-like language: variables, constants, and the function/class/instance registries.

Variables are a stack of frames. Every function, method or constructor call pushes a frame: the callee can read the
whole namespace of its callers (there is only one flat, dynamic namespace), but its writes land in its own frame, so
they are gone once the call returns. This is the snapshot/restore contract without copying the scope on every call.
Constants and the registries are not framed and last for the whole run.
"""

from collections import ChainMap
from contextlib import contextmanager
from dataclasses import dataclass, field
from itertools import count

from falconlike.lang.error import EvaluationError
from falconlike.lang.values import String


FIELD_PREFIX = "self_"


@dataclass(frozen=True)
class Function:
    """Named function or method: parameter names and a parsed body. Never mutated after creation."""
    name: str
    params: tuple
    body: tuple


@dataclass
class Class:
    name: str
    methods: dict

    def resolve(self, method_name):
        """Returns the Function for method_name, or None."""
        return self.methods.get(method_name)


@dataclass
class Instance:
    """Instance of a Class. fields hold self_<name>: Value entries, shared by every method call on the instance."""
    name: str
    class_name: str
    fields: dict = field(default_factory=dict)


class Scope:
    """Everything visible to running statements."""

    def __init__(self):
        self.variables = ChainMap()  # maps[0] is the innermost frame
        self.constants = {}

        self.functions = {}  # name: Function
        self.classes = {}    # name: Class
        self.instances = {}  # instance name: Instance

        self._instance_ids = count(1)

    def lookup(self, name):
        """Returns the Value of variable name, else of constant name, else None."""
        value = self.variables.get(name)
        if value is None:
            value = self.constants.get(name)
        return value

    def assign(self, name, value):
        """Binds name to value in the innermost frame. Constants can't be reassigned."""
        if name in self.constants:
            raise EvaluationError("cannot assign to constant '{}'", name)
        self.variables[name] = value

    def define_constant(self, name, value):
        """Binds constant name to value. A constant is only ever bound once."""
        if name in self.constants:
            raise EvaluationError("constant '{}' is already defined as '{}'", (name, str(self.constants[name])))
        self.constants[name] = value

    @contextmanager
    def frame(self):
        """Pushes a frame for the duration of a call and yields it (a dict); the frame is popped afterwards, along with
        the instances created in it.
        """
        self.variables = self.variables.new_child()
        frame = self.variables.maps[0]
        try:
            yield frame
        finally:
            self.variables = self.variables.parents
            for name in frame.keys() & self.instances.keys():
                if name not in self.variables:
                    del self.instances[name]

    @property
    def depth(self):
        """Number of frames pushed on top of the global one."""
        return len(self.variables.maps) - 1

    def resolve_class(self, name):
        """Returns Class name, or raises an EvaluationError."""
        try:
            return self.classes[name]
        except KeyError:
            raise EvaluationError("unknown class '{}'", name) from None

    def instantiate(self, cls):
        """Creates an Instance of cls under a new unique name, bound to the class name in the innermost frame."""
        instance = Instance(f"obj{cls.name}{next(self._instance_ids)}", cls.name)
        self.instances[instance.name] = instance
        self.assign(instance.name, String(cls.name))
        return instance

    def resolve_instance(self, name, alias=True):
        """Returns the Instance that variable name is bound to, or None. A variable holding the name of an instance
        (such as last_instance) resolves to that instance when alias is set.
        """
        value = self.variables.get(name)
        if value is None:
            return None

        instance = self.instances.get(name)
        if instance is not None and value == String(instance.class_name):
            return instance
        if alias and isinstance(value, String):
            return self.resolve_instance(value.value, alias=False)
        return None

    def split_method_call(self, command):
        """Splits command into (Instance, method name) at the first underscore whose prefix resolves to an instance.
        Returns (None, None) if there is no such underscore.
        """
        for idx, char in enumerate(command):
            if char == "_" and idx:
                instance = self.resolve_instance(command[:idx])
                if instance is not None:
                    return instance, command[idx + 1:]
        return None, None

    @staticmethod
    def fields_of(frame):
        """Returns the self_<name> entries of frame."""
        return {name: value for name, value in frame.items() if name.startswith(FIELD_PREFIX)}
