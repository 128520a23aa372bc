import copy
import json
import logging
from typing import Dict, Any

from ..world.model import World

logger = logging.getLogger(__name__)


def to_dict(world: World) -> Dict[str, Any]:
    """Converts the durable memory of a world to a dictionary for serialization."""
    return {
        "time": world.time,
        "memory": copy.deepcopy(world.memory),
        "flags": {
            flag_name: copy.deepcopy(flag.memory)
            for flag_name, flag in world.flags.items()
            if flag.memory
        },
    }


def restore_memory(world: World, data: Dict[str, Any]) -> World:
    """
    Applies a saved memory snapshot to a freshly loaded world. Flags that no
    longer exist are skipped; their memory goes with them. Call this before
    building the Empire, which holds on to the memory dict it is given.
    """
    world.memory.clear()
    world.memory.update(copy.deepcopy(data.get("memory", {})))
    for flag_name, flag_memory in data.get("flags", {}).items():
        flag = world.flag(flag_name)
        if flag is None:
            logger.info("Dropping memory for missing flag %s", flag_name)
            continue
        flag.memory.clear()
        flag.memory.update(copy.deepcopy(flag_memory))
    if "time" in data:
        world.time = max(world.time, data["time"])
    return world


def save_to_json(world: World, path: str):
    """Saves the world memory to a JSON file."""
    with open(path, 'w') as f:
        json.dump(to_dict(world), f, indent=2)


def load_from_json(world: World, path: str) -> World:
    """Loads world memory from a JSON file into ``world``."""
    with open(path, 'r') as f:
        data = json.load(f)
    return restore_memory(world, data)
