"""
Dialogue program format for the tree runtime.

A program is a JSON object:

```
{
  "id": "shop",
  "startNodeId": "greet",
  "nodes": {
    "greet": {"type": "NPC", "content": "Welcome!", "nextNodeId": "menu"},
    "menu": {
      "type": "PLAYER",
      "choices": [
        {"id": "buy", "text": "Buy", "nextNodeId": "wares"},
        {"id": "leave", "text": "Leave"}
      ]
    },
    "wares": {"type": "NPC", "content": "Take a look."}
  }
}
```

A node's "id" may be omitted and defaults to its key. Every nextNodeId
must name a node in the program; an absent nextNodeId ends the dialogue.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from dialogue_runner.core.errors import ProgramFormatError


class ProgramModel(BaseModel):
    """Base for program models: camelCase on the wire, strict about keys."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra='forbid',
    )


class PlayerChoice(ProgramModel):
    """A single option offered at a PLAYER node."""
    id: str
    text: str = ""
    line_id: Optional[str] = Field(default=None, alias="lineId")
    next_node_id: Optional[str] = Field(default=None, alias="nextNodeId")
    enabled: bool = True

    @property
    def resolved_line_id(self) -> str:
        return self.line_id or self.id


class NpcNode(ProgramModel):
    """A node that speaks a single line."""
    type: Literal["NPC"] = "NPC"
    id: str = ""
    speaker: Optional[str] = None
    content: str = ""
    line_id: Optional[str] = Field(default=None, alias="lineId")
    substitutions: list[str] = Field(default_factory=list)
    next_node_id: Optional[str] = Field(default=None, alias="nextNodeId")
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def resolved_line_id(self) -> str:
        return self.line_id or self.id


class PlayerNode(ProgramModel):
    """A branching point where the player picks a choice."""
    type: Literal["PLAYER"] = "PLAYER"
    id: str = ""
    choices: list[PlayerChoice] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)


DialogueNode = Annotated[Union[NpcNode, PlayerNode], Field(discriminator="type")]


class DialogueTree(ProgramModel):
    """A complete dialogue graph."""
    id: str
    title: Optional[str] = None
    start_node_id: str = Field(alias="startNodeId")
    nodes: dict[str, DialogueNode]

    @model_validator(mode="before")
    @classmethod
    def _default_node_ids(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("nodes"), dict):
            return data

        nodes = {}
        for key, node in data["nodes"].items():
            if isinstance(node, dict) and not node.get("id"):
                node = {**node, "id": key}
            nodes[key] = node
        return {**data, "nodes": nodes}

    @model_validator(mode="after")
    def _check_references(self) -> DialogueTree:
        for key, node in self.nodes.items():
            if node.id != key:
                raise ValueError(f"Node '{key}' declares mismatched id '{node.id}'")

        if self.start_node_id not in self.nodes:
            raise ValueError(f"Start node '{self.start_node_id}' is not defined")

        for node in self.nodes.values():
            if isinstance(node, NpcNode):
                targets = [node.next_node_id]
            else:
                targets = [choice.next_node_id for choice in node.choices]
            for target in targets:
                if target is not None and target not in self.nodes:
                    raise ValueError(f"Node '{node.id}' points to undefined node '{target}'")

        return self

    def get_node(self, node_id: Optional[str]) -> Optional[NpcNode | PlayerNode]:
        """Get a node by ID."""
        if node_id is None:
            return None
        return self.nodes.get(node_id)


def parse_program(program: Any) -> DialogueTree:
    """
    Parse a program into a DialogueTree.

    Args:
        program: UTF-8 JSON bytes, JSON text, a mapping, or a DialogueTree

    Raises:
        ProgramFormatError: If the program cannot be decoded or validated
    """
    if isinstance(program, DialogueTree):
        return program

    try:
        if isinstance(program, (bytes, bytearray, memoryview)):
            program = bytes(program).decode('utf-8')
        if isinstance(program, str):
            program = json.loads(program)
        if isinstance(program, Mapping):
            return DialogueTree.model_validate(dict(program))
    except UnicodeDecodeError as e:
        raise ProgramFormatError(f"Program is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ProgramFormatError(f"Program is not valid JSON: {e}") from e
    except ValidationError as e:
        raise ProgramFormatError(f"Invalid dialogue program: {e}") from e

    raise ProgramFormatError(f"Unsupported program type: {type(program).__name__}")


def load_program_file(path: str | Path) -> DialogueTree:
    """
    Load a dialogue program from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ProgramFormatError: If the file is not a valid program
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dialogue program not found: {path}")

    with open(path, 'rb') as f:
        return parse_program(f.read())


def dump_program(tree: DialogueTree) -> str:
    """Serialize a DialogueTree back to its JSON wire format."""
    return json.dumps(tree.model_dump(by_alias=True, exclude_none=True), indent=2)
