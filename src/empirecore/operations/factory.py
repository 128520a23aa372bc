from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional, Tuple, Type, TYPE_CHECKING

from .operation import Operation

if TYPE_CHECKING:
    from ..empire.empire import Empire
    from ..world.model import Flag, World

logger = logging.getLogger(__name__)


def parse_flag_name(flag_name: str) -> Optional[Tuple[str, str]]:
    """Splits ``type_name`` flags; waypoint and malformed flags give None."""
    if "_waypoints_" in flag_name:
        return None
    op_type, sep, op_name = flag_name.partition("_")
    if not sep or not op_type or not op_name:
        return None
    return op_type, op_name


class OperationFactory:
    def __init__(self):
        self._types: Dict[str, Type[Operation]] = {}

    def register(self, op_type: str) -> Callable[[Type[Operation]], Type[Operation]]:
        def decorator(cls: Type[Operation]) -> Type[Operation]:
            if op_type in self._types:
                raise ValueError(f"Operation type '{op_type}' is already registered.")
            self._types[op_type] = cls
            return cls
        return decorator

    def types(self) -> List[str]:
        return list(self._types)

    def create(self, flag: Flag, empire: Empire) -> Optional[Operation]:
        parsed = parse_flag_name(flag.name)
        if parsed is None:
            return None
        op_type, op_name = parsed
        cls = self._types.get(op_type)
        if cls is None:
            logger.warning("No operation type '%s' for flag %s", op_type, flag.name)
            return None
        return cls(flag, op_name, op_type, empire)


def sync_operations(world: World, empire: Empire, factory: OperationFactory) -> List[Operation]:
    """
    Registers an operation for every new operation flag, in flag name order,
    and drops operations whose flag has been removed. Returns the new ones.
    """
    created = []
    live_names = set()
    for flag_name in sorted(world.flags):
        parsed = parse_flag_name(flag_name)
        if parsed is None:
            continue
        live_names.add(parsed[1])
        if parsed[1] in empire.operations:
            continue
        operation = factory.create(world.flags[flag_name], empire)
        if operation is not None:
            empire.add_operation(operation)
            created.append(operation)

    for name in list(empire.operations):
        if name not in live_names:
            empire.remove_operation(name)
            logger.info("Operation %s removed with its flag", name)
    return created


# Global factory instance
operation_factory = OperationFactory()
