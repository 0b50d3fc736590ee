"""Swipe actions: what happens to a clip once a decision is made.

An action is one of ``Move(target)``, ``Delete`` or ``Skip``. Older
configuration files used fixed roles ("ARoll", "BRoll") and a
``custom_folder`` entry; those are folder presets, so they load as
``Move`` actions.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from sortie.errors import ValidationError

TRASH_FOLDER = "_Trash"

# Legacy fixed roles -> folder name
_LEGACY_FOLDERS = {
    "ARoll": "A-Roll",
    "BRoll": "B-Roll",
}


class MoveAction(BaseModel):
    """Move the clip into ``target``, relative to the clip's own folder."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Move"] = "Move"
    target: str


class DeleteAction(BaseModel):
    """Move the clip into the trash folder next to it."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Delete"] = "Delete"


class SkipAction(BaseModel):
    """Leave the clip where it is."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Skip"] = "Skip"


SwipeAction = Annotated[
    Union[MoveAction, DeleteAction, SkipAction],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter = TypeAdapter(SwipeAction)


def normalize_action_data(data: Any) -> Any:
    """Rewrite legacy action dictionaries into the ``Move`` shape.

    Anything that is not a legacy dictionary is returned untouched and
    left to pydantic to validate.
    """
    if not isinstance(data, dict):
        return data

    action_type = data.get("type")
    if action_type in _LEGACY_FOLDERS:
        return {"type": "Move", "target": _LEGACY_FOLDERS[action_type]}
    if action_type == "custom_folder":
        return {"type": "Move", "target": data.get("path", "")}
    return data


def action_from_dict(data: Any) -> MoveAction | DeleteAction | SkipAction:
    """Validate a (possibly legacy) action dictionary."""
    return _action_adapter.validate_python(normalize_action_data(data))


def parse_action(name: str, target: str | None = None) -> MoveAction | DeleteAction | SkipAction:
    """Build an action from a user-typed name.

    Args:
        name: "move", "delete", "skip" or a legacy role ("aroll", "broll")
        target: Folder for "move"

    Raises:
        ValidationError: Unknown name, or "move" without a target
    """
    key = name.strip().lower()
    if key == "skip":
        return SkipAction()
    if key == "delete":
        return DeleteAction()
    if key == "move":
        if not target:
            raise ValidationError("A move action needs a target folder", context={"action": name})
        return MoveAction(target=target)
    for legacy, folder in _LEGACY_FOLDERS.items():
        if key == legacy.lower():
            return MoveAction(target=target or folder)
    raise ValidationError(
        f"Unknown action '{name}'. Use move, delete or skip.",
        context={"action": name},
    )


def action_label(action: MoveAction | DeleteAction | SkipAction) -> str:
    """Short label shown next to a swipe direction."""
    if isinstance(action, MoveAction):
        return action.target
    return action.type
