"""
Defines the core Pydantic data models for the application.

These models serve as the formal, validated data contract between all other pillars.
Outbound payloads follow the chat-completion conventions of the OpenAI SDK.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

# --- Constants ---
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
SYSTEM_ROLE = "system"
Role = Literal["user", "assistant", "system"]

REQUIREMENTS_DELIMITER = "---REQUIREMENTS---"
README_DELIMITER = "---README---"
BUNDLE_DELIMITERS = (REQUIREMENTS_DELIMITER, README_DELIMITER)

SCRIPT_FILENAME = "script.py"
REQUIREMENTS_FILENAME = "requirements.txt"
README_FILENAME = "README.md"


# --- Models ---
class ChatMessage(BaseModel):
    """Represents a single, immutable message within a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class Conversation(BaseModel):
    """An ordered, append-only log of chat messages."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    messages: List[ChatMessage] = Field(default_factory=list)


class RequestSpec(BaseModel):
    """Everything needed for one call to the chat-completion service.

    Built fresh for every call and never persisted.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = Field(min_length=1)
    credential: SecretStr
    messages: List[Dict[str, str]]
    max_output_tokens: int = Field(gt=0)
    temperature: float = Field(ge=0.0, le=2.0)


class ArtifactBundle(BaseModel):
    """The generated script, its requirements and its README.

    Frozen so a bundle can only ever be replaced as a whole.
    """

    model_config = ConfigDict(frozen=True)

    primary_file: str
    manifest: str
    docs: str
    source_conversation_snapshot: str = ""

    def files(self) -> Dict[str, str]:
        """Returns the export file layout, keyed by filename."""
        return {
            SCRIPT_FILENAME: self.primary_file,
            REQUIREMENTS_FILENAME: self.manifest,
            README_FILENAME: self.docs,
        }


class SessionContext(BaseModel):
    """Typed handoff between pipeline stages of a single session.

    Replaces string-keyed session storage: the selected model, the credential,
    and the transcript of the design conversation captured at generation time.
    Generated files themselves live in the artifact store.
    """

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(min_length=1)
    credential: SecretStr
    conversation_context: Optional[str] = None

    @field_validator("credential")
    @classmethod
    def _credential_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("credential must not be blank")
        return value
