"""
Koalab Backend: Board and Postit Schemas
=========================================

What:  Pydantic models defining the JSON contract for boards and postits.
How:   *Create models validate request bodies; *Response models serialize
       rows. The identifier is exposed as `_id`.

Input rules:
    - Request models have no identifier field, so a client-supplied `_id`
      is silently dropped (unknown keys are ignored).
    - Missing fields take zero values ("" / 0).
"""

from pydantic import AliasChoices, BaseModel, Field


def _id_field(description: str):
    # Accepts `id` (ORM attribute, keyword construction) and `_id` on input,
    # always serializes as `_id`
    return Field(
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="_id",
        description=description,
    )


# ══════════════════════════════════════════════════════════════════════════
# Nested value objects
# ══════════════════════════════════════════════════════════════════════════


class Coords(BaseModel):
    """Position of a postit on the canvas."""
    x: int = 0
    y: int = 0


class Size(BaseModel):
    """Width and height of a postit."""
    w: int = 0
    h: int = 0


# ══════════════════════════════════════════════════════════════════════════
# Boards
# ══════════════════════════════════════════════════════════════════════════


class BoardCreate(BaseModel):
    """Body of POST /api/boards."""
    title: str = Field(default="", description="Board title")


class BoardResponse(BaseModel):
    """A stored board."""
    id: str = _id_field("Server-generated board identifier")
    title: str = Field(description="Board title")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Postits
# ══════════════════════════════════════════════════════════════════════════


class PostitCreate(BaseModel):
    """
    Body of POST /api/boards/{id}/postits.

    `board_id` is not accepted from the body; it always comes from the path.
    """
    title: str = Field(default="", description="Text written on the note")
    coords: Coords = Field(default_factory=Coords)
    size: Size = Field(default_factory=Size)
    angle: int = Field(default=0, description="Rotation in degrees")
    color: str = Field(default="", description="CSS color name or value")


class PostitResponse(BaseModel):
    """A stored postit."""
    id: str = _id_field("Server-generated postit identifier")
    board_id: str = Field(description="Identifier of the owning board")
    title: str
    coords: Coords
    size: Size
    angle: int
    color: str

