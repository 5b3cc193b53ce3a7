"""Capability contracts for ranges, enforced by a metaclass at class creation."""

import time
import logging
from typing import Any, Dict, List, Type
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Global range registry: class name -> {'class', 'capabilities', 'registered_at'}
RANGE_REGISTRY: Dict[str, Dict[str, Any]] = {}


class ContractViolationError(Exception):
    """Raised when a range class does not provide a capability it declares."""
    pass


class PreconditionViolation(AssertionError):
    """Raised when a caller breaks a range precondition (programmer error)."""
    pass


def require(condition: bool, message: str):
    """Raise PreconditionViolation unless condition holds."""
    if not condition:
        raise PreconditionViolation(message)


@dataclass
class CapabilityContract:
    """Named set of members a range must expose."""
    name: str
    required_members: List[str]
    refines: List["CapabilityContract"] = field(default_factory=list)
    description: str = ""

    def all_members(self) -> List[str]:
        members = []
        for parent in self.refines:
            for member in parent.all_members():
                if member not in members:
                    members.append(member)
        for member in self.required_members:
            if member not in members:
                members.append(member)
        return members


INPUT_RANGE = CapabilityContract(
    name="InputRange",
    required_members=["empty", "front", "pop_front"],
    description="Test for empty, read the current element, advance"
)

FORWARD_RANGE = CapabilityContract(
    name="ForwardRange",
    required_members=["save"],
    refines=[INPUT_RANGE],
    description="Input range whose position can be duplicated"
)

BIDIRECTIONAL_RANGE = CapabilityContract(
    name="BidirectionalRange",
    required_members=["back", "pop_back"],
    refines=[FORWARD_RANGE],
    description="Forward range that can also be read from the back"
)

RANDOM_ACCESS_RANGE = CapabilityContract(
    name="RandomAccessRange",
    required_members=["__getitem__"],
    refines=[FORWARD_RANGE],
    description="Forward range indexable by offset; finite ones also have a length"
)

ALL_CONTRACTS = [INPUT_RANGE, FORWARD_RANGE, BIDIRECTIONAL_RANGE, RANDOM_ACCESS_RANGE]


def _missing_members(target: Any, contract: CapabilityContract) -> List[str]:
    # Inspect the class, never the instance: properties must not be evaluated
    owner = target if isinstance(target, type) else type(target)
    missing = [m for m in contract.all_members() if not hasattr(owner, m)]
    if contract is RANDOM_ACCESS_RANGE:
        # finite random access ranges must know their length
        if not getattr(owner, "is_infinite", False) and not hasattr(owner, "__len__"):
            missing.append("__len__")
    return missing


class RangeMeta(type):
    """Metaclass checking declared capabilities and registering range classes."""

    def __new__(cls, name, bases, namespace, capabilities: List[CapabilityContract] = None, **kwargs):
        # Skip enforcement for abstract bases
        if name.endswith('Base') or namespace.get('__abstract__', False):
            new_class = super().__new__(cls, name, bases, namespace)
            new_class._capabilities = list(capabilities or [])
            return new_class

        if capabilities is None:
            for base in bases:
                if getattr(base, '_capabilities', None):
                    capabilities = base._capabilities
                    break

        new_class = super().__new__(cls, name, bases, namespace)
        new_class._capabilities = list(capabilities or [])

        for contract in new_class._capabilities:
            missing = _missing_members(new_class, contract)
            if missing:
                raise ContractViolationError(
                    f"Range {name} declares {contract.name} but is missing: {', '.join(missing)}"
                )

        cls._register_range(new_class)
        return new_class

    def __init__(cls, name, bases, namespace, capabilities=None, **kwargs):
        super().__init__(name, bases, namespace)

    @staticmethod
    def _register_range(range_class: Type):
        RANGE_REGISTRY[range_class.__name__] = {
            'class': range_class,
            'capabilities': [c.name for c in range_class._capabilities],
            'registered_at': time.time()
        }
        logger.debug(f"Registered range {range_class.__name__}: "
                     f"{[c.name for c in range_class._capabilities]}")


class RangeBase(metaclass=RangeMeta):
    """Common base for all ranges; makes every range a Python iterable."""
    __abstract__ = True
    is_infinite = False

    def __iter__(self):
        r = self.save() if is_forward_range(self) else self
        while not r.empty:
            yield r.front
            r.pop_front()

    def __repr__(self):
        return f"<{self.__class__.__name__}>"


def is_input_range(obj: Any) -> bool:
    return not _missing_members(obj, INPUT_RANGE)


def is_forward_range(obj: Any) -> bool:
    return not _missing_members(obj, FORWARD_RANGE)


def is_bidirectional_range(obj: Any) -> bool:
    return not _missing_members(obj, BIDIRECTIONAL_RANGE)


def is_random_access_range(obj: Any) -> bool:
    return not _missing_members(obj, RANDOM_ACCESS_RANGE)


def is_infinite(obj: Any) -> bool:
    owner = obj if isinstance(obj, type) else type(obj)
    return bool(getattr(owner, "is_infinite", False))


def has_length(obj: Any) -> bool:
    owner = obj if isinstance(obj, type) else type(obj)
    return hasattr(owner, "__len__")


def describe_capabilities(obj: Any) -> List[str]:
    """Names of every capability contract obj satisfies."""
    return [c.name for c in ALL_CONTRACTS if not _missing_members(obj, c)]


def validate_contract_compliance(range_class: Type, contract: CapabilityContract) -> Dict[str, Any]:
    """Check a class against a contract without raising."""
    missing = _missing_members(range_class, contract)
    return {
        "class_name": range_class.__name__,
        "contract": contract.name,
        "compliant": not missing,
        "missing_members": missing
    }


def get_registered_ranges() -> Dict[str, Dict[str, Any]]:
    return dict(RANGE_REGISTRY)
