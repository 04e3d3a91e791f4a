from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"


class Motif(str, Enum):
    ORBS = "orbs"
    BANDS = "bands"
    SHARDS = "shards"
    GRID = "grid"
    WAVES = "waves"


# Style Profile Sub-Schemas
class PaletteSchema(BaseModel):
    model_config = {"frozen": True}

    background: tuple[str, str] = Field(description="Top and bottom hex stops of the backdrop gradient")
    colors: tuple[str, ...] = Field(description="Hex colors used for shapes, most prominent first")
    accent: str = Field(description="Hex color for focal highlights")
    shadow: str = Field(description="Darkest tone used when re-toning a base image")
    highlight: str = Field(description="Lightest tone used when re-toning a base image")


class TextureSchema(BaseModel):
    model_config = {"frozen": True}

    grain: float = Field(default=0.1, ge=0.0, le=1.0, description="Noise amplitude, 0 = clean")
    softness: float = Field(default=0.0, ge=0.0, description="Gaussian blur radius in pixels")
    stroke_width: int = Field(default=2, ge=0, description="Outline width for motif shapes")
    motif: Motif = Field(default=Motif.ORBS, description="Recurring shape family")


class CompositionSchema(BaseModel):
    model_config = {"frozen": True}

    density: int = Field(default=12, ge=1, description="Number of motif shapes per canvas")
    horizon: float = Field(default=0.6, ge=0.0, le=1.0, description="Vertical anchor of the composition")
    symmetry: bool = Field(default=False, description="Mirror the left half onto the right")
    scale: float = Field(default=0.3, gt=0.0, le=1.0, description="Shape size relative to the canvas")


# Main Style Profile
class StyleProfile(BaseModel):
    model_config = {"frozen": True}

    id: str
    label: str
    description: str = ""
    palette: PaletteSchema
    texture: TextureSchema = Field(default_factory=TextureSchema)
    composition: CompositionSchema = Field(default_factory=CompositionSchema)


class MessageMeta(BaseModel):
    model_config = {"frozen": True}

    style_id: str
    iteration: int
    # None when the attempt failed before an image existed
    base_image_used: bool | None = None


class ChatMessage(BaseModel):
    model_config = {"frozen": True}

    id: str
    role: Role
    text: str
    image: str | None = Field(default=None, description="PNG data URI")
    created_at: datetime
    meta: MessageMeta | None = None


# API Request/Response Schemas
class SubmitRequest(BaseModel):
    prompt: str = Field(description="What the user wants to see")


class StyleSelectRequest(BaseModel):
    style_id: str


class BaseImageRequest(BaseModel):
    image: str = Field(description="Data URI or raw base64 encoded image")
    label: str | None = Field(default=None, description="Preview label, usually the file name")


class AdoptRequest(BaseModel):
    message_id: str


class SessionSnapshot(BaseModel):
    messages: list[ChatMessage]
    status: SessionStatus
    busy: bool
    active_style_id: str | None = None
    iteration: int = 0
    has_base_image: bool = False
    base_image_label: str | None = None


class SubmitResponse(BaseModel):
    user_message: ChatMessage
    assistant_message: ChatMessage
    snapshot: SessionSnapshot


class StyleSummary(BaseModel):
    id: str
    label: str
    description: str
    palette: PaletteSchema
    motif: Motif
