from typing import NewType

RoomName = NewType('RoomName', str)
FlagName = NewType('FlagName', str)
OperationName = NewType('OperationName', str)
MissionName = NewType('MissionName', str)
ObjectId = NewType('ObjectId', str)
