import logging
from pathlib import Path
from typing import Dict, Any
import yaml

from ..core.ids import RoomName, FlagName, ObjectId
from .model import (
    World, Room, Flag, Position, Spawn, Controller, Source, Mineral,
    Structure, ConstructionSite, room_coords,
)

logger = logging.getLogger(__name__)


class WorldSchemaError(Exception):
    """Raised when there is a problem with the world scenario schema."""
    pass


def _check_room_name(name: str, context: str) -> RoomName:
    try:
        room_coords(name)
    except ValueError:
        raise WorldSchemaError(f"{context} references malformed room name '{name}'.")
    return RoomName(name)


def _position(data: Dict[str, Any], room_name: RoomName) -> Position:
    return Position(room=room_name, x=data.get('x', 25), y=data.get('y', 25))


def _load_room(r_data: Dict[str, Any]) -> Room:
    room_name = _check_room_name(r_data['name'], "Room")

    controller = None
    if r_data.get('controller') is not None:
        c_data = r_data['controller']
        controller = Controller(owner=c_data.get('owner'), level=c_data.get('level', 0))

    spawns = [
        Spawn(
            id=ObjectId(s_data['id']),
            name=s_data.get('name', s_data['id']),
            owner=s_data['owner'],
            spawning=s_data.get('spawning'),
        )
        for s_data in r_data.get('spawns', [])
    ]
    sources = [
        Source(id=ObjectId(s_data['id']), pos=_position(s_data, room_name))
        for s_data in r_data.get('sources', [])
    ]
    minerals = [
        Mineral(
            id=ObjectId(m_data['id']),
            pos=_position(m_data, room_name),
            mineral_type=m_data.get('type', 'H'),
        )
        for m_data in r_data.get('minerals', [])
    ]
    structures = [
        Structure(
            id=ObjectId(s_data['id']),
            structure_type=s_data['type'],
            pos=_position(s_data, room_name),
            hits=s_data.get('hits', 1),
            hits_max=s_data.get('hits_max', s_data.get('hits', 1)),
        )
        for s_data in r_data.get('structures', [])
    ]
    return Room(
        name=room_name,
        controller=controller,
        spawns=spawns,
        sources=sources,
        minerals=minerals,
        structures=structures,
    )


def world_from_dict(data: Dict[str, Any]) -> World:
    username = data.get('username')
    if not username:
        raise WorldSchemaError("Missing 'username' in world data.")

    rooms_data = data.get('rooms', [])
    flags_data = data.get('flags', [])
    sites_data = data.get('construction_sites', [])

    # Schema check: duplicate names
    room_names = [r['name'] for r in rooms_data]
    if len(room_names) != len(set(room_names)):
        raise WorldSchemaError("Duplicate room names found.")

    flag_names = [f['name'] for f in flags_data]
    if len(flag_names) != len(set(flag_names)):
        raise WorldSchemaError("Duplicate flag names found.")

    rooms = {}
    for r_data in rooms_data:
        room = _load_room(r_data)
        rooms[room.name] = room

    flags = {}
    for f_data in flags_data:
        room_name = _check_room_name(f_data['room'], f"Flag '{f_data['name']}'")
        flags[FlagName(f_data['name'])] = Flag(
            name=FlagName(f_data['name']),
            pos=_position(f_data, room_name),
            memory=dict(f_data.get('memory', {})),
        )

    sites = {}
    for s_data in sites_data:
        room_name = _check_room_name(s_data['room'], f"Construction site '{s_data['id']}'")
        sites[ObjectId(s_data['id'])] = ConstructionSite(
            id=ObjectId(s_data['id']),
            pos=_position(s_data, room_name),
            structure_type=s_data.get('type', 'road'),
        )

    world = World(
        username=username,
        time=data.get('time', 0),
        rooms=rooms,
        flags=flags,
        construction_sites=sites,
        memory=dict(data.get('memory', {})),
    )
    logger.debug("Built world for %s: %d rooms, %d flags", username, len(rooms), len(flags))
    return world


def load_world(path: Path) -> World:
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        raise WorldSchemaError(f"YAML file '{path}' is empty or malformed.")

    return world_from_dict(data)
